import httpx
import logging
from typing import Optional

from ..config import settings
from ..exceptions import ExtractionFailed
from ..models.document import Document, DocumentKind
from ..normalization.html_distiller import HtmlDistiller
from .base import BaseSource
from .locators import domain_of, webpage_ref

logger = logging.getLogger(__name__)

class WebPageSource(BaseSource):
    """Fetches a web page and distills its main content into Markdown."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        distiller: Optional[HtmlDistiller] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.client = client
        self.distiller = distiller or HtmlDistiller()
        self.timeout = timeout if timeout is not None else settings.request_timeout

    async def fetch(self, url: str) -> str | bytes:
        """
        GET the page.

        Returns:
            Decoded text when the server declares a charset, else raw bytes
            so the HTML parser can sniff <meta charset>.

        Raises:
            ExtractionFailed: Transport error, timeout or non-2xx status
        """
        headers = {"User-Agent": settings.user_agent}
        try:
            logger.info(f"Fetching webpage {url}")
            if self.client is not None:
                response = await self.client.get(url, headers=headers, timeout=self.timeout, follow_redirects=True)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url, headers=headers, timeout=self.timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Fetch failed for {url}: HTTP {e.response.status_code}")
            raise ExtractionFailed(f"Failed to extract content: HTTP {e.response.status_code} from {url}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Fetch failed for {url}: {e}")
            raise ExtractionFailed(f"Failed to extract content: {e}") from e

        logger.info("Webpage fetched successfully")
        return response.text if response.charset_encoding else response.content

    async def extract(self, locator: str, created_at: int) -> Document:
        html = await self.fetch(locator)
        title, markdown = self.distiller.distill(html)

        return Document(
            id=f"{created_at}_{webpage_ref(locator)}",
            kind=DocumentKind.WEBPAGE,
            title=title,
            source_url=locator,
            source_ref=domain_of(locator),
            created_at=created_at,
            body=markdown,
        )
