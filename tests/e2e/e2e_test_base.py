import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from init.generate_placeholder_templates import generate_placeholders
from src.api.limits import rate_limiter
from src.db.database import get_db_session
from src.db.models import Base
from src.server import app
from src.utils.logging_config import setup_logging
from tests.test_template import TestTemplate


setup_logging(debug=True)


class E2ETestBase(TestTemplate):
    """Base class for E2E tests: fresh in-memory database and placeholder template assets"""

    # Type hints for instance variables set by fixtures
    client: TestClient
    db: Session

    @pytest.fixture(scope="session", autouse=True)
    def template_assets(self):
        """Make sure every catalog template has an image to draw on"""
        generate_placeholders()

    @pytest.fixture(autouse=True)
    def setup_test(self, setup):  # noqa
        """Setup test client against an isolated database"""
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=engine)
        testing_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        def override_get_db_session():
            db = testing_session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db_session] = override_get_db_session
        rate_limiter.reset()

        self.db = testing_session()
        self.client = TestClient(app)
        yield

        self.db.close()
        app.dependency_overrides.pop(get_db_session, None)
        rate_limiter.reset()
        engine.dispose()

    def generate(self, **payload) -> dict:
        """POST /api/generate and return the JSON body, asserting success"""
        payload.setdefault("prompt", "mondays")
        response = self.client.post("/api/generate", json=payload)
        assert response.status_code == 200, response.text
        return response.json()
