from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import os
from fastapi.routing import APIRouter
from loguru import logger as log

from src.db.database import init_db
from src.services.meme.render.errors import RenderError, ZoneOverflow
from src.utils.logging_config import new_session_id, setup_logging
from common import global_config

# Setup logging before anything else
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Initialize FastAPI app
app = FastAPI(title=global_config.app_name, lifespan=lifespan)

# Add CORS middleware with specific allowed origins
app.add_middleware(  # type: ignore[call-overload]
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=global_config.server.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def bind_log_session(request: Request, call_next):
    """Give every request its own logging session id."""
    new_session_id()
    return await call_next(request)


@app.exception_handler(RenderError)
async def render_error_handler(request: Request, exc: RenderError) -> JSONResponse:
    log.opt(exception=exc).error(f"Render failed for {request.url.path}: {exc}")
    status_code = 422 if isinstance(exc, ZoneOverflow) else 500
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": type(exc).__name__},
    )


# Automatically discover and include all routers
def include_all_routers():
    from src.api.routes import all_routers

    main_router = APIRouter()
    for router in all_routers:
        main_router.include_router(router)

    return main_router


app.include_router(include_all_routers())

# Serve rendered memes
generated_dir = global_config.resolve_path(global_config.render.output_dir)
generated_dir.mkdir(parents=True, exist_ok=True)
app.mount(
    global_config.server.generated_url_prefix,
    StaticFiles(directory=generated_dir),
    name="generated",
)


if __name__ == "__main__":
    # Configure uvicorn to use our logging config
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8080)),
        log_config=None,  # Disable uvicorn's logging config
        access_log=True,  # Enable access logs
    )
