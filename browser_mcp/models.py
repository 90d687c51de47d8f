"""
Data model definitions
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from playwright.async_api import Page


class ActionType(str, Enum):
    """Single page interactions understood by the action executor"""
    NAVIGATE = "navigate"
    BACK = "back"
    FORWARD = "forward"
    CLICK = "click"
    FILL = "fill"
    SELECT = "select"
    CHECK = "check"
    UNCHECK = "uncheck"
    PRESS = "press"
    SCROLL = "scroll"
    HIGHLIGHT = "highlight"


class AssertionType(str, Enum):
    """Conditions the assertion evaluator can check"""
    ELEMENT_EXISTS = "element_exists"
    ELEMENT_NOT_EXISTS = "element_not_exists"
    ELEMENT_VISIBLE = "element_visible"
    ELEMENT_HIDDEN = "element_hidden"
    TEXT_CONTAINS = "text_contains"
    TEXT_EQUALS = "text_equals"
    VALUE_EQUALS = "value_equals"
    URL_CONTAINS = "url_contains"
    TITLE_CONTAINS = "title_contains"
    ELEMENT_COUNT = "element_count"


class DiagnosticsKind(str, Enum):
    CONSOLE = "console"
    NETWORK = "network"
    ALL = "all"


class StepKind(str, Enum):
    ACTION = "action"
    ASSERTION = "assertion"


class RunState(str, Enum):
    """Sequence run state"""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ConsoleEntry:
    """One console message captured from a page"""
    level: str
    text: str
    timestamp: datetime
    url: Optional[str] = None
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "level": self.level,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.url:
            data["url"] = self.url
        if self.line:
            data["line"] = self.line
        return data


@dataclass(frozen=True)
class NetworkEntry:
    """A resolved network request: either a status or an error, never both"""
    method: str
    url: str
    timestamp: datetime
    status: Optional[int] = None
    error: Optional[str] = None
    duration_ms: Optional[float] = None

    def __post_init__(self):
        if (self.status is None) == (self.error is None):
            raise ValueError("NetworkEntry needs exactly one of status or error")

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "method": self.method,
            "url": self.url,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.failed:
            data["error"] = self.error
        else:
            data["status"] = self.status
        if self.duration_ms is not None:
            data["duration_ms"] = self.duration_ms
        return data


@dataclass(frozen=True)
class PendingRequest:
    """A request that has started but not yet completed"""
    correlation_id: str
    start: float
    method: str
    url: str


@dataclass
class Session:
    """A named browser tab with its own diagnostics"""
    name: str
    page: Page
    diagnostics: "SessionDiagnostics"
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session": self.name,
            "url": self.page.url,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class ActionParams:
    type: str
    selector: Optional[str] = None
    value: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActionParams":
        return cls(
            type=data.get("action") or data.get("type") or "",
            selector=data.get("selector"),
            value=data.get("value"),
            url=data.get("url"),
        )


@dataclass
class ActionResult:
    """Outcome of a single action"""
    action: str
    success: bool = True
    url: Optional[str] = None
    title: Optional[str] = None
    selector: Optional[str] = None
    direction: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"success": self.success, "action": self.action}
        for key in ("url", "title", "selector", "direction", "error"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass(frozen=True)
class AssertionOutcome:
    """Outcome of one assertion check"""
    assertion: str
    passed: bool
    message: str
    actual: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assertion": self.assertion,
            "passed": self.passed,
            "message": self.message,
            "actual": self.actual,
        }


@dataclass(frozen=True)
class SequenceStep:
    index: int
    kind: StepKind
    name: str
    params: Dict[str, Any]


@dataclass(frozen=True)
class StepOutcome:
    """Record of one attempted sequence step"""
    index: int
    kind: StepKind
    name: str
    success: bool
    detail: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    collaborator: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "index": self.index,
            "kind": self.kind.value,
            "name": self.name,
            "success": self.success,
        }
        if self.detail is not None:
            data["detail"] = self.detail
        if self.error is not None:
            data["error"] = self.error
        if self.collaborator is not None:
            data["collaborator"] = self.collaborator
        return data


@dataclass(frozen=True)
class SequenceResult:
    """Immutable record of a finished sequence run"""
    success: bool
    completed: int
    total: int
    steps: Tuple[StepOutcome, ...]
    final_state: Dict[str, Any]

    def __post_init__(self):
        if self.completed > self.total:
            raise ValueError("completed steps cannot exceed total steps")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "completed": self.completed,
            "total": self.total,
            "steps": [step.to_dict() for step in self.steps],
            "final_state": dict(self.final_state),
        }
