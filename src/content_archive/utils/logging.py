import structlog
import hashlib
import logging
from typing import Any, Dict, Optional
import os

# Configure structlog
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

class AuditLogger:
    """
    Audit trail of archive events written to a JSONL file.
    Source URLs are hashed for correlation and only a truncated preview is kept.
    """

    def __init__(self, service_name: str, log_dir: str = "logs"):
        self.service_name = service_name
        self.log_dir = str(log_dir)

        # Ensure log dir exists
        os.makedirs(self.log_dir, exist_ok=True)

        self.log_file = os.path.join(self.log_dir, "audit.jsonl")

        # One stdlib logger per service, backed by a file handler for the audit file
        self._audit_logger = logging.getLogger(f"audit_logger_{service_name}")
        self._audit_logger.setLevel(logging.INFO)
        self._audit_logger.propagate = False

        # Avoid adding handlers multiple times if instantiated repeatedly
        if not any(getattr(h, "baseFilename", None) == os.path.abspath(self.log_file)
                   for h in self._audit_logger.handlers):
            handler = logging.FileHandler(self.log_file, encoding="utf-8")
            formatter = logging.Formatter('%(message)s') # JSON renderer does formatting
            handler.setFormatter(formatter)
            self._audit_logger.addHandler(handler)

        self._logger = structlog.wrap_logger(self._audit_logger, processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
        ])

    def _hash_input(self, text: str) -> str:
        """SHA256 hash of the input for correlation without storage."""
        return hashlib.sha256(text.encode()).hexdigest()

    def _sanitize_input(self, text: str, max_len: int = 100) -> str:
        """Truncate input to avoid massive logs."""
        return text[:max_len] + "..." if len(text) > max_len else text

    def log_event(self, event_type: str, severity: str, source_url: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Log an archive event.

        Args:
            event_type: e.g. "DOCUMENT_ARCHIVED", "DOCUMENT_EVICTED", "INGESTION_FAILED"
            severity: "INFO", "WARN", "CRITICAL"
            source_url: Locator associated with the event (hashed + previewed)
            details: Extra metadata
        """
        log_entry: Dict[str, Any] = {
            "service_name": self.service_name,
            "event_type": event_type,
            "severity": severity,
        }

        if source_url:
            log_entry["source_hash"] = self._hash_input(source_url)
            log_entry["source_preview"] = self._sanitize_input(source_url)

        if details:
            log_entry.update(details)

        self._logger.info(**log_entry)
