"""Archive exceptions."""


class ArchiveError(Exception):
    """Base exception for Content Archive."""

    pass


class InvalidInput(ArchiveError):
    """Locator or storage key is missing or malformed."""

    pass


class ExtractionFailed(ArchiveError):
    """Fetching, parsing or an external tool failed during ingestion."""

    pass


class SubtitlesNotFound(ExtractionFailed):
    """The subtitle tool ran cleanly but produced no track."""

    pass


class MalformedArtifact(ArchiveError):
    """Stored record could not be decoded."""

    pass


class NotFound(ArchiveError):
    """Requested key does not exist in the store."""

    pass


class StorageFailed(ArchiveError):
    """Filesystem write or permission failure."""

    pass
