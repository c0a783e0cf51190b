"""
Tests for DOM construction from fetched markup and fixture pages.
"""

import pytest

from app.features.scan.errors import RenderFailure
from app.features.scan.services.rendering.render_service import FIXTURE_PAGES, RenderService

PAGE = """
<html>
  <head><title>Shop</title></head>
  <body onload="init()">
    <button onclick="buy()" class="cta">Buy</button>
    <script>alert('x')</script>
    <script src="/app.js"></script>
    <img src="/logo.png" alt="Logo">
  </body>
</html>
"""


class TestRender:
    def test_scripts_and_inline_handlers_are_removed(self):
        page = RenderService().render(PAGE, "https://shop.example/")

        assert page.document.find("script") is None
        assert page.document.body.get("onload") is None
        button = page.document.find("button")
        assert button.get("onclick") is None
        assert button.get("class") == ["cta"]
        assert "alert(" not in page.serialize()

    def test_base_href_points_at_page(self):
        page = RenderService(load_subresources=True).render(PAGE, "https://shop.example/products/")

        base = page.document.head.find("base")
        assert base["href"] == "https://shop.example/products/"

    def test_existing_base_href_is_kept(self):
        html = '<html><head><base href="https://cdn.example/"></head><body><p>x</p></body></html>'
        page = RenderService(load_subresources=True).render(html, "https://shop.example/")

        bases = page.document.find_all("base")
        assert len(bases) == 1
        assert bases[0]["href"] == "https://cdn.example/"

    def test_no_base_href_without_subresources(self):
        page = RenderService(load_subresources=False).render(PAGE, "https://shop.example/")
        assert page.document.find("base") is None

    def test_fragment_without_head_gets_one(self):
        page = RenderService(load_subresources=True).render("<p>Hello</p>", "https://shop.example/")
        assert page.document.find("base")["href"] == "https://shop.example/"

    @pytest.mark.parametrize("html", ["", "   \n  ", "just some text"])
    def test_empty_or_elementless_markup_fails(self, html):
        with pytest.raises(RenderFailure):
            RenderService().render(html, "https://shop.example/")


class TestFixtures:
    @pytest.mark.parametrize("token", sorted(FIXTURE_PAGES))
    def test_reserved_tokens_are_fixtures(self, token):
        assert RenderService.is_fixture(token)

    def test_real_url_is_not_a_fixture(self):
        assert not RenderService.is_fixture("https://example.com")

    @pytest.mark.asyncio
    async def test_sample_fixture_loads_from_disk(self):
        page = await RenderService().load_fixture("test-sample")

        assert page.url.startswith("file://")
        assert page.url.endswith("sample.html")
        assert page.document.find("img") is not None
        assert page.document.find("script") is None

    @pytest.mark.asyncio
    async def test_test_and_test_sample_share_a_page(self):
        renderer = RenderService()
        assert renderer.fixture_path("test") == renderer.fixture_path("test-sample")
        assert renderer.fixture_path("test-accessible") != renderer.fixture_path("test")

    @pytest.mark.asyncio
    async def test_missing_fixture_file_fails(self, tmp_path):
        with pytest.raises(RenderFailure) as exc_info:
            await RenderService(fixtures_dir=str(tmp_path)).load_fixture("test-accessible")
        assert isinstance(exc_info.value.cause, OSError)

    @pytest.mark.asyncio
    async def test_unknown_token_fails(self):
        with pytest.raises(RenderFailure):
            await RenderService().load_fixture("example.com")
