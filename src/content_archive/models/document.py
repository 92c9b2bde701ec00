from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class DocumentKind(str, Enum):
    WEBPAGE = "webpage"
    TRANSCRIPT = "transcript"


class Document(BaseModel):
    """One archived, normalized unit of content."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Storage key stem: {created_at}_{source slug}")
    kind: DocumentKind
    title: str = Field(..., min_length=1)
    source_url: Optional[str] = Field(default=None, description="Original locator, absent on legacy records")
    source_ref: Optional[str] = Field(default=None, description="Domain for webpages, video id for transcripts")
    created_at: int = Field(..., ge=0, description="Milliseconds since epoch, 0 for legacy records")
    body: str = Field(default="", description="Markdown (webpage) or plain text (transcript)")


class DocumentSummary(BaseModel):
    """Listing row for the archive history."""

    key: str
    title: str
    kind: DocumentKind
    created_at: int
    source_url: Optional[str] = None
