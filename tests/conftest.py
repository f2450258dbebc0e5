import os
import tempfile

# Point storage and rendering at a scratch directory before common.global_config
# is imported anywhere.
_TEST_ROOT = tempfile.mkdtemp(prefix="evomeme-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_ROOT, 'evomeme.db')}"
os.environ["RENDER__OUTPUT_DIR"] = os.path.join(_TEST_ROOT, "generated")
os.environ["RENDER__TEMPLATES_DIR"] = os.path.join(_TEST_ROOT, "templates")

import pytest  # noqa: E402

from common import global_config  # noqa: E402


@pytest.fixture(autouse=True)
def no_llm_provider_keys(monkeypatch):
    """Keep tests offline: every caption generator falls back unless a test opts in."""
    monkeypatch.setattr(global_config, "OPENROUTER_API_KEY", "")
    monkeypatch.setattr(global_config, "HUGGING_FACE_ACCESS_TOKEN", "")
