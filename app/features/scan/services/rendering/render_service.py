import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from bs4 import BeautifulSoup

from app.features.scan.errors import RenderFailure
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

FIXTURE_PAGES: Dict[str, str] = {
    "test": "sample.html",
    "test-sample": "sample.html",
    "test-accessible": "accessible.html",
}


@dataclass
class RenderedPage:
    url: str
    document: BeautifulSoup

    def serialize(self) -> str:
        return str(self.document)


class RenderService:
    """
    Builds the DOM tree handed to the rule evaluator.

    Page scripts never run: <script> elements and inline on* handlers are
    stripped from the tree. With subresources enabled a <base href> is added so
    relative stylesheets and images resolve against the original page.
    """

    def __init__(
        self,
        fixtures_dir: str = settings.FIXTURES_DIR,
        load_subresources: bool = settings.LOAD_SUBRESOURCES,
    ):
        self.fixtures_dir = Path(fixtures_dir)
        self.load_subresources = load_subresources

    @staticmethod
    def is_fixture(target: str) -> bool:
        return target in FIXTURE_PAGES

    def fixture_path(self, token: str) -> Path:
        return self.fixtures_dir / FIXTURE_PAGES[token]

    def render(self, html: str, base_url: str) -> RenderedPage:
        if not html or not html.strip():
            raise RenderFailure(f"Empty document received for {base_url}")

        try:
            document = BeautifulSoup(html, "html.parser")
        except Exception as e:
            raise RenderFailure(f"Could not parse markup from {base_url}: {e}", cause=e) from e

        if document.find(True) is None:
            raise RenderFailure(f"No elements found in markup from {base_url}")

        removed = self._strip_scripts(document)
        if self.load_subresources and base_url.startswith(("http://", "https://")):
            self._set_base_href(document, base_url)

        logger.info(f"Built DOM for {base_url} ({removed} script elements removed)")
        return RenderedPage(url=base_url, document=document)

    async def load_fixture(self, token: str) -> RenderedPage:
        """Render the bundled page behind a reserved test token without touching the network."""
        if token not in FIXTURE_PAGES:
            raise RenderFailure(f"{token!r} is not a reserved test identifier")

        path = self.fixture_path(token)
        try:
            html = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            raise RenderFailure(f"Fixture page {path} could not be read: {e}", cause=e) from e

        logger.info(f"Loaded fixture page {path.name} for {token!r} ({len(html)} bytes)")
        return self.render(html, path.resolve().as_uri())

    @staticmethod
    def _strip_scripts(document: BeautifulSoup) -> int:
        scripts = document.find_all("script")
        for script in scripts:
            script.decompose()

        for element in document.find_all(True):
            handlers = [name for name in element.attrs if name.lower().startswith("on")]
            for name in handlers:
                del element.attrs[name]

        return len(scripts)

    @staticmethod
    def _set_base_href(document: BeautifulSoup, base_url: str) -> None:
        existing = document.find("base")
        if existing is not None and existing.get("href"):
            return

        base = document.new_tag("base", href=base_url)
        head = document.find("head")
        if head is None:
            head = document.new_tag("head")
            html = document.find("html")
            if html is not None:
                html.insert(0, head)
            else:
                document.insert(0, head)
        head.insert(0, base)
