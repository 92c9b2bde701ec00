"""
Main-content extraction for web pages: strip page chrome, pick the article
region, convert it to Markdown.
"""
import logging
import re
from typing import Callable, List, Tuple

from bs4 import BeautifulSoup, Tag
from markdownify import ATX, BACKSLASH, MarkdownConverter

from .text import strip_control_chars

logger = logging.getLogger(__name__)

NOISE_TAGS = ["script", "style", "iframe", "nav", "footer", "header", "aside"]

# Fenced code is emitted verbatim; whitespace tidying only touches the prose between fences.
FENCED_BLOCK = re.compile(r"^```.*?^```[ \t]*$", re.MULTILINE | re.DOTALL)
TRAILING_SPACE = re.compile(r"[ \t]+\n")
BLANK_RUN = re.compile(r"\n{3,}")


def _attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        value = " ".join(value)
    return str(value).lower()


# Ordered noise rules; an element matching any of them is removed with its subtree.
NOISE_RULES: List[Tuple[str, Callable[[Tag], bool]]] = [
    ("class*=ad", lambda t: "ad" in _attr(t, "class")),
    ("class*=advertisement", lambda t: "advertisement" in _attr(t, "class")),
    ("id*=ad-", lambda t: "ad-" in _attr(t, "id")),
    ("id*=advertisement", lambda t: "advertisement" in _attr(t, "id")),
    ("class*=social", lambda t: "social" in _attr(t, "class")),
    ("id*=social", lambda t: "social" in _attr(t, "id")),
]

# Main content candidates in priority order; the first selector with any match wins.
CONTENT_SELECTORS = [
    "article",
    '[role="main"]',
    ".post-content",
    ".article-content",
    ".entry-content",
    ".content-area",
    "main",
    "#main-content",
]


class HtmlDistiller:
    """Turns raw HTML into (title, markdown_body)."""

    def __init__(self, parser: str = "html.parser"):
        self.parser = parser
        self.converter = MarkdownConverter(heading_style=ATX, bullets="-", newline_style=BACKSLASH)

    def distill(self, raw_html: str | bytes) -> Tuple[str, str]:
        soup = BeautifulSoup(raw_html or "", self.parser)

        self._strip_noise(soup)
        region = self._find_main_content(soup)
        title = self._extract_title(soup)
        logger.info(f"Found title: {title}")

        markdown = self._to_markdown(region)
        logger.info(f"Converted main content to Markdown ({len(markdown)} chars)")
        return title, markdown

    def _strip_noise(self, soup: BeautifulSoup) -> None:
        logger.debug("Cleaning HTML content...")
        for tag in soup.find_all(NOISE_TAGS):
            if not tag.decomposed:
                tag.decompose()

        removed = 0
        for tag in soup.find_all(True):
            # document skeleton is never noise, e.g. <body class="loaded">
            if tag.decomposed or tag.name in ("html", "head", "body"):
                continue
            for rule_name, matches in NOISE_RULES:
                if matches(tag):
                    logger.debug(f"Removing <{tag.name}> matched by {rule_name}")
                    tag.decompose()
                    removed += 1
                    break
        logger.debug(f"HTML cleaning completed, {removed} noise elements removed")

    def _find_main_content(self, soup: BeautifulSoup) -> Tag:
        for selector in CONTENT_SELECTORS:
            match = soup.select_one(selector)
            if match is not None:
                logger.info(f"Found main content using selector: {selector}")
                return match

        logger.info("Main content not found, falling back to body")
        return soup.body if soup.body is not None else soup

    def _extract_title(self, soup: BeautifulSoup) -> str:
        if soup.title is not None:
            title = soup.title.get_text().strip()
            if title:
                return title

        h1 = soup.find("h1")
        if h1 is not None:
            title = h1.get_text().strip()
            if title:
                return title

        return "Untitled"

    def _to_markdown(self, region: Tag) -> str:
        inner_html = "".join(str(child) for child in region.contents)
        if not inner_html.strip():
            return ""

        markdown = strip_control_chars(self.converter.convert(inner_html))
        return _tidy(markdown).strip()


def _tidy(markdown: str) -> str:
    parts = []
    last = 0
    for block in FENCED_BLOCK.finditer(markdown):
        parts.append(_tidy_prose(markdown[last:block.start()]))
        parts.append(block.group())
        last = block.end()
    parts.append(_tidy_prose(markdown[last:]))
    return "".join(parts)


def _tidy_prose(text: str) -> str:
    text = TRAILING_SPACE.sub("\n", text)
    return BLANK_RUN.sub("\n\n", text)
