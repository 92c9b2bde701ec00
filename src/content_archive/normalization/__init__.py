from .html_distiller import HtmlDistiller
from .transcript_normalizer import TranscriptNormalizer

__all__ = [
    "HtmlDistiller",
    "TranscriptNormalizer"
]
