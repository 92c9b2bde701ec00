from typing import TypedDict, Optional, Any, Callable
from langgraph.graph import StateGraph, END
import logging
import time

from ..exceptions import ArchiveError
from ..ingestion.base import BaseSource
from ..ingestion.locators import classify, validate_locator
from ..ingestion.webpage import WebPageSource
from ..ingestion.youtube import YouTubeSource
from ..models.document import Document, DocumentKind
from ..persistence.retention_store import RetentionStore
from ..utils.logging import AuditLogger

logger = logging.getLogger(__name__)

class IngestionState(TypedDict, total=False):
    locator: str
    kind: DocumentKind
    created_at: int
    document: Optional[Document]
    key: Optional[str]


class MonotonicClock:
    """Epoch milliseconds that never repeat within one process."""

    def __init__(self, source: Callable[[], float] = time.time) -> None:
        self._source = source
        self._last = 0

    def now_ms(self) -> int:
        now = int(self._source() * 1000)
        if now <= self._last:
            now = self._last + 1
        self._last = now
        return now


class IngestionGraph:
    """Per-locator ingestion workflow: classify -> extract (web | transcript) -> save."""

    def __init__(
        self,
        store: Optional[RetentionStore] = None,
        web_source: Optional[BaseSource] = None,
        video_source: Optional[BaseSource] = None,
        audit: Optional[AuditLogger] = None,
        clock: Optional[MonotonicClock] = None,
    ) -> None:
        self.store = store or RetentionStore(audit=audit)
        self.web_source = web_source or WebPageSource()
        self.video_source = video_source or YouTubeSource()
        self.audit = audit
        self.clock = clock or MonotonicClock()

        self.workflow = self._build_graph()

    def _build_graph(self) -> Any:
        workflow = StateGraph(IngestionState)

        # Nodes
        workflow.add_node("classify", self.classify_node)
        workflow.add_node("webpage", self.webpage_node)
        workflow.add_node("transcript", self.transcript_node)
        workflow.add_node("save", self.save_node)

        # Edges
        workflow.set_entry_point("classify")

        workflow.add_conditional_edges(
            "classify",
            self.route_by_kind,
            {
                "webpage": "webpage",
                "transcript": "transcript"
            }
        )

        workflow.add_edge("webpage", "save")
        workflow.add_edge("transcript", "save")
        workflow.add_edge("save", END)

        return workflow.compile()

    def classify_node(self, state: IngestionState) -> IngestionState:
        locator = validate_locator(state.get("locator"))
        kind = classify(locator)
        logger.info(f"Processing URL: {locator} ({kind.value})")
        return {"locator": locator, "kind": kind, "created_at": self.clock.now_ms()}

    async def webpage_node(self, state: IngestionState) -> IngestionState:
        doc = await self.web_source.extract(state["locator"], state["created_at"])
        return {"document": doc}

    async def transcript_node(self, state: IngestionState) -> IngestionState:
        doc = await self.video_source.extract(state["locator"], state["created_at"])
        return {"document": doc}

    def save_node(self, state: IngestionState) -> IngestionState:
        doc = state["document"]
        key = self.store.save(doc)
        return {"key": key}

    def route_by_kind(self, state: IngestionState) -> str:
        return state["kind"].value

    async def ingest(self, locator: str) -> Document:
        """
        Fetch, normalize and archive one URL.

        Raises:
            InvalidInput: Locator missing or not an http(s) URL
            ExtractionFailed: Fetch, parse or yt-dlp failure
            StorageFailed: Artifact could not be written
        """
        try:
            final_state = await self.workflow.ainvoke(IngestionState(locator=locator))
        except ArchiveError as e:
            logger.error(f"Ingestion failed for {locator}: {e}")
            if self.audit:
                self.audit.log_event("INGESTION_FAILED", "WARN", source_url=locator,
                                     details={"error_type": type(e).__name__, "error": str(e)})
            raise

        doc = final_state["document"]
        logger.info(f"✅ Archived {final_state['key']}: {doc.title}")
        if self.audit:
            self.audit.log_event("DOCUMENT_ARCHIVED", "INFO", source_url=doc.source_url, details={
                "key": final_state["key"],
                "kind": doc.kind.value,
                "body_chars": len(doc.body),
            })
        return doc
