"""HTML parser utilities for event extraction."""

import re

from bs4 import BeautifulSoup, Tag

from ..logger import get_logger

logger = get_logger(__name__)


class HTMLParser:
    """
    Parsed listing page handed to the extractors.

    Wraps BeautifulSoup with convenience methods for common
    event extraction patterns.
    """

    def __init__(self, html: str, base_url: str = ""):
        """
        Initialize parser with HTML content.

        Args:
            html: HTML content to parse
            base_url: URL the page was fetched from
        """
        self.soup = BeautifulSoup(html or "", "lxml")
        self.base_url = base_url

    def select(self, selector: str) -> list[Tag]:
        """Select all elements matching a CSS selector."""
        return self.soup.select(selector)

    def script_texts(self, script_type: str | None = None) -> list[str]:
        """
        Return the bodies of inline <script> elements.

        Args:
            script_type: Only scripts with this ``type`` attribute
                (e.g. "application/ld+json"); all scripts when None

        Returns:
            Script contents in document order, empty scripts skipped
        """
        if script_type:
            scripts = self.soup.find_all("script", type=script_type)
        else:
            scripts = self.soup.find_all("script")

        texts = []
        for script in scripts:
            text = script.string if script.string is not None else script.get_text()
            if text and text.strip():
                texts.append(text)
        return texts

    def get_text(self, element: Tag, selector: str = "", strip: bool = True) -> str:
        """
        Extract text content from element or its first matching child.

        Returns:
            Text content or empty string
        """
        target = element
        if selector:
            target = element.select_one(selector)
        if target is None:
            return ""
        text = target.get_text()
        return text.strip() if strip else text

    def get_attr(
        self, element: Tag, attr: str, selector: str = "", default: str = ""
    ) -> str:
        """
        Extract attribute value from element or its first matching child.

        Returns:
            Attribute value or default
        """
        target = element
        if selector:
            target = element.select_one(selector)
        if target is None:
            return default
        value = target.get(attr)
        if value is None:
            return default
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def get_image(self, element: Tag, selector: str = "img") -> str:
        """
        Extract image source, falling back to lazy-load attributes.

        Returns:
            Image URL as written in the page, or empty string
        """
        src = self.get_attr(element, "src", selector)
        if not src or src.startswith("data:"):
            src = self.get_attr(element, "data-src", selector)
        return src

    @staticmethod
    def clean_text(text: str) -> str:
        """Collapse runs of whitespace and strip."""
        if not text:
            return ""
        text = re.sub(r"\s+", " ", text)
        return text.strip()
