"""
Per-session console and network capture.

Each session owns two bounded ring buffers and a network correlator. Page
event callbacks only append; they never await, so an append can't interleave
with a read-and-clear performed by a tool call.
"""
import logging
import time
from collections import deque
from datetime import datetime
from typing import Any, Callable, Deque, Dict, Generic, List, Optional, TypeVar

from playwright.async_api import ConsoleMessage, Page, Request, Response

from .config import DEFAULT_DIAGNOSTICS_LIMIT, MAX_BUFFER_SIZE
from .errors import ToolUsageError
from .models import ConsoleEntry, DiagnosticsKind, NetworkEntry, PendingRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DiagnosticsBuffer(Generic[T]):
    """Fixed-capacity FIFO; appending past capacity evicts the oldest entry."""

    def __init__(self, capacity: int = MAX_BUFFER_SIZE):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._entries: Deque[T] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: T) -> None:
        self._entries.append(entry)

    def snapshot(self) -> List[T]:
        """Entries oldest-first."""
        return list(self._entries)

    def read(
        self,
        limit: int = DEFAULT_DIAGNOSTICS_LIMIT,
        predicate: Optional[Callable[[T], bool]] = None,
        clear: bool = False,
    ) -> List[T]:
        """
        Return up to ``limit`` entries, most recent first.

        ``predicate`` filters before the limit is applied. With ``clear`` the
        whole buffer is emptied after the read; the returned list still holds
        the pre-clear contents.
        """
        entries = self.snapshot()
        if predicate is not None:
            entries = [e for e in entries if predicate(e)]
        recent = entries[-limit:] if limit > 0 else []
        recent.reverse()
        if clear:
            self._entries.clear()
        return recent

    def clear(self) -> None:
        self._entries.clear()


class NetworkCorrelator:
    """
    Pairs request-start events with their completion.

    Correlation ids are ``"<url>-<epoch ms>"`` and are not collision-free: two
    requests for the same URL started in the same millisecond share an id. The
    first completion consumes the pending entry; the second is recorded
    without a duration.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._pending: Dict[str, PendingRequest] = {}
        self._ids: Dict[Any, str] = {}

    def __len__(self) -> int:
        return len(self._pending)

    @staticmethod
    def correlation_id(url: str, started_ms: int) -> str:
        return f"{url}-{started_ms}"

    def started(self, request: Any, method: str, url: str) -> str:
        cid = self.correlation_id(url, int(time.time() * 1000))
        # on collision the first request keeps its start time
        self._pending.setdefault(cid, PendingRequest(
            correlation_id=cid,
            start=self._clock(),
            method=method,
            url=url,
        ))
        self._ids[request] = cid
        return cid

    def finished(self, request: Any) -> Optional[float]:
        """Resolve a request; returns elapsed milliseconds or None if unmatched."""
        cid = self._ids.pop(request, None)
        if cid is None:
            return None
        pending = self._pending.pop(cid, None)
        if pending is None:
            return None
        return max(0.0, round((self._clock() - pending.start) * 1000, 1))


class SessionDiagnostics:
    """Console and network buffers belonging to one session"""

    def __init__(self, capacity: int = MAX_BUFFER_SIZE):
        self.console: DiagnosticsBuffer[ConsoleEntry] = DiagnosticsBuffer(capacity)
        self.network: DiagnosticsBuffer[NetworkEntry] = DiagnosticsBuffer(capacity)
        self.correlator = NetworkCorrelator()

    # Producers

    def record_console(self, msg: ConsoleMessage) -> None:
        location = msg.location or {}
        self.console.append(ConsoleEntry(
            level=msg.type,
            text=msg.text,
            url=location.get("url") or None,
            line=location.get("lineNumber") or None,
            timestamp=datetime.now(),
        ))

    def record_request(self, request: Request) -> None:
        self.correlator.started(request, request.method, request.url)

    def record_response(self, response: Response) -> None:
        request = response.request
        self.network.append(NetworkEntry(
            method=request.method,
            url=request.url,
            status=response.status,
            duration_ms=self.correlator.finished(request),
            timestamp=datetime.now(),
        ))

    def record_request_failed(self, request: Request) -> None:
        self.network.append(NetworkEntry(
            method=request.method,
            url=request.url,
            error=request.failure or "Request failed",
            duration_ms=self.correlator.finished(request),
            timestamp=datetime.now(),
        ))

    def attach(self, page: Page) -> None:
        """Register observers on a page for the lifetime of the session."""
        page.on("console", self.record_console)
        page.on("request", self.record_request)
        page.on("response", self.record_response)
        page.on("requestfailed", self.record_request_failed)

    # Consumers

    def read(
        self,
        kind: str = DiagnosticsKind.ALL.value,
        level: Optional[str] = None,
        limit: int = DEFAULT_DIAGNOSTICS_LIMIT,
        clear: bool = False,
    ) -> Dict[str, List[Dict[str, Any]]]:
        """Read one or both buffers, most recent first, optionally clearing."""
        try:
            kind = DiagnosticsKind(kind)
        except ValueError:
            raise ToolUsageError(f"Unknown diagnostics type: {kind}") from None
        result: Dict[str, List[Dict[str, Any]]] = {}

        if kind in (DiagnosticsKind.CONSOLE, DiagnosticsKind.ALL):
            predicate = (lambda e: e.level == level) if level else None
            entries = self.console.read(limit, predicate=predicate, clear=clear)
            result["console"] = [e.to_dict() for e in entries]

        if kind in (DiagnosticsKind.NETWORK, DiagnosticsKind.ALL):
            entries = self.network.read(limit, clear=clear)
            result["network"] = [e.to_dict() for e in entries]

        if clear:
            logger.debug(f"Cleared {kind.value} diagnostics")
        return result
