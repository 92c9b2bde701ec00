from abc import ABC, abstractmethod
from ..models.document import Document

class BaseSource(ABC):
    """Abstract base class for all content sources."""

    @abstractmethod
    async def extract(self, locator: str, created_at: int) -> Document:
        """
        Fetch the locator and normalize it into a Document.

        Args:
            locator: Validated http(s) URL
            created_at: Creation timestamp (ms); also the id prefix

        Returns:
            Document ready to be persisted

        Raises:
            ExtractionFailed: Network, parsing or external tool failure
        """
        pass
