"""
E2E tests for meme generation
"""

from PIL import Image

from common import global_config
from src.db.models import Meme
from tests.e2e.e2e_test_base import E2ETestBase


class TestGenerateMeme(E2ETestBase):
    """Tests for POST /api/generate with every caption provider offline"""

    def test_generate_renders_and_stores_meme(self):
        data = self.generate(prompt="mondays", template_id="drake", tone="sarcastic")

        assert data["success"] is True
        assert data["text_only"] is False
        meme = data["meme"]
        assert meme["template_id"] == "drake"
        assert meme["template_name"] == "Drake Hotline Bling"
        assert meme["caption"]
        assert meme["alt_text"] == f"Meme with caption: {meme['caption']}"
        assert meme["image_url"] == f"{global_config.server.generated_url_prefix}/{meme['id']}.jpg"

        output_dir = global_config.resolve_path(global_config.render.output_dir)
        with Image.open(output_dir / f"{meme['id']}.jpg") as image:
            assert image.format == "JPEG"

        stored = self.db.get(Meme, meme["id"])
        assert stored is not None
        assert stored.caption == meme["caption"]
        assert stored.tone == "sarcastic"
        assert stored.session_id

    def test_generated_image_is_served(self):
        data = self.generate(template_id="drake")

        response = self.client.get(data["meme"]["image_url"])

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"

    def test_random_template_when_none_given(self):
        data = self.generate(prompt="cats")
        template_ids = {t["template_id"] for t in self.client.get("/api/templates").json()}
        assert data["meme"]["template_id"] in template_ids

    def test_session_cookie_is_reused(self):
        self.generate()
        session = self.client.cookies.get("session_id")
        assert session

        data = self.generate()
        assert self.db.get(Meme, data["meme"]["id"]).session_id == session

    def test_text_only_mode_returns_meme_idea(self):
        data = self.generate(prompt="coffee", generate_image_mode=False)

        assert data["text_only"] is True
        meme = data["meme"]
        assert meme["image_url"] is None
        assert meme["meme_idea"]["template_suggestion"]
        assert "coffee" in meme["meme_idea"]["visual_description"]
        assert self.db.get(Meme, meme["id"]).template_id == "text-only"

    def test_unknown_template_is_404(self):
        response = self.client.post(
            "/api/generate", json={"prompt": "x", "template_id": "does-not-exist"}
        )
        assert response.status_code == 404

    def test_empty_prompt_is_rejected(self):
        response = self.client.post("/api/generate", json={"prompt": ""})
        assert response.status_code == 422

    def test_missing_template_asset_is_500(self, monkeypatch, tmp_path):
        monkeypatch.setattr(global_config.render, "templates_dir", str(tmp_path))

        response = self.client.post(
            "/api/generate", json={"prompt": "x", "template_id": "drake"}
        )

        assert response.status_code == 500
        assert response.json()["code"] == "TemplateAssetMissing"

    def test_rate_limit(self, monkeypatch):
        monkeypatch.setattr(global_config.rate_limit, "enabled", True)
        limit = global_config.rate_limit.max_requests

        for remaining in range(limit - 1, -1, -1):
            response = self.client.post(
                "/api/generate", json={"prompt": "x", "generate_image_mode": False}
            )
            assert response.status_code == 200
            assert response.headers["X-RateLimit-Remaining"] == str(remaining)

        response = self.client.post("/api/generate", json={"prompt": "x"})
        assert response.status_code == 429
        assert response.json()["detail"]["code"] == "rate_limit_exceeded"
