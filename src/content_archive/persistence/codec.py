"""
Artifact format for archived documents.

An artifact is a JSON header fenced by ``---`` lines, a blank line, then the
body verbatim::

    ---
    {"title": "...", "url": "...", "timestamp": 1700000000000, "type": "webpage", ...}
    ---

    <body>

Files without the fence are legacy records written before the header existed;
they decode with the whole file as body and metadata guessed from the key.
"""
import json
import logging
import re
from typing import Any, Dict

from pydantic import ValidationError

from ..exceptions import MalformedArtifact
from ..models.document import Document, DocumentKind

logger = logging.getLogger(__name__)

FENCE = "---\n"
CLOSING_FENCE = "\n---\n"

# Header "type" values. Transcripts are written as "youtube" so older readers keep working.
_TYPE_TO_KIND = {
    "webpage": DocumentKind.WEBPAGE,
    "youtube": DocumentKind.TRANSCRIPT,
    "transcript": DocumentKind.TRANSCRIPT,
}
_KIND_TO_TYPE = {
    DocumentKind.WEBPAGE: "webpage",
    DocumentKind.TRANSCRIPT: "youtube",
}

# {timestamp}_{11-char video id}, the shape transcript keys have always had
_TRANSCRIPT_KEY = re.compile(r"^\d+_[A-Za-z0-9_-]{11}$")


def key_stem(key: str) -> str:
    """Strip everything from the first dot: '1700_abc.md' -> '1700_abc'."""
    return re.sub(r"\..*$", "", key)


def title_from_key(key: str) -> str:
    title = re.sub(r"[-_]+", " ", key_stem(key)).strip()
    return title or "Untitled"


def looks_like_transcript_key(key: str) -> bool:
    """Heuristic only: legacy files carry no type, so guess from the file name."""
    return "youtube" in key.lower() or bool(_TRANSCRIPT_KEY.match(key_stem(key)))


def encode(doc: Document) -> str:
    """Serialize a document into its on-disk artifact text."""
    header: Dict[str, Any] = {
        "id": doc.id,
        "title": doc.title,
        "timestamp": doc.created_at,
        "type": _KIND_TO_TYPE[doc.kind],
    }
    if doc.source_url is not None:
        header["url"] = doc.source_url
    if doc.source_ref is not None:
        ref_field = "domain" if doc.kind == DocumentKind.WEBPAGE else "videoId"
        header[ref_field] = doc.source_ref

    return f"{FENCE}{json.dumps(header, ensure_ascii=False, indent=2)}{CLOSING_FENCE}\n{doc.body}"


def decode(artifact: str, key: str) -> Document:
    """
    Parse an artifact back into a Document.

    Args:
        artifact: Full file content
        key: Storage key (file name); used for the id and for legacy inference

    Raises:
        MalformedArtifact: Header present but not a JSON object, or fields invalid
    """
    if not artifact.startswith(FENCE):
        return _decode_legacy(artifact, key)

    end = artifact.find(CLOSING_FENCE, len(FENCE) - 1)
    if end == -1:
        return _decode_legacy(artifact, key)

    header_text = artifact[len(FENCE):end]
    body = artifact[end + len(CLOSING_FENCE):]
    if body.startswith("\n"):
        body = body[1:]

    try:
        header = json.loads(header_text)
    except json.JSONDecodeError as e:
        raise MalformedArtifact(f"{key}: header is not valid JSON ({e})") from e
    if not isinstance(header, dict):
        raise MalformedArtifact(f"{key}: header is not a JSON object")

    type_value = header.get("type")
    if type_value is None:
        kind = DocumentKind.TRANSCRIPT if looks_like_transcript_key(key) else DocumentKind.WEBPAGE
    elif type_value in _TYPE_TO_KIND:
        kind = _TYPE_TO_KIND[type_value]
    else:
        raise MalformedArtifact(f"{key}: unknown document type {type_value!r}")

    if kind == DocumentKind.WEBPAGE:
        source_ref = header.get("domain", header.get("videoId"))
    else:
        source_ref = header.get("videoId", header.get("domain"))

    try:
        return Document(
            id=header.get("id") or key_stem(key),
            kind=kind,
            title=header.get("title") or title_from_key(key),
            source_url=header.get("url"),
            source_ref=source_ref,
            created_at=header.get("timestamp", 0),
            body=body,
        )
    except ValidationError as e:
        raise MalformedArtifact(f"{key}: invalid header fields ({e.error_count()} errors)") from e


def _decode_legacy(artifact: str, key: str) -> Document:
    logger.debug(f"No metadata header in {key}, reading as legacy record")
    kind = DocumentKind.TRANSCRIPT if looks_like_transcript_key(key) else DocumentKind.WEBPAGE
    return Document(
        id=key_stem(key) or key,
        kind=kind,
        title=title_from_key(key),
        created_at=0,
        body=artifact,
    )
