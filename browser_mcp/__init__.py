"""
Browser session MCP server

- models: data models
- diagnostics: console/network ring buffers and request correlation
- registry: named sessions over one shared browser
- actions: single page interactions
- assertions: page condition checks
- sequence: ordered multi-step runs
- browser_manager: tool-facing operations
- tools: MCP tool definitions
- config: configuration constants
"""

from .models import ActionResult, ActionType, AssertionType, SequenceResult, Session
from .diagnostics import DiagnosticsBuffer, NetworkCorrelator, SessionDiagnostics
from .registry import SessionRegistry
from .actions import perform_action
from .assertions import evaluate_assertion
from .sequence import SequenceRunner, run_sequence
from .browser_manager import PlaywrightBrowserManager
from .tools import create_tools, handle_tool_call
from .config import DEFAULT_PORT, DEFAULT_HOST, SCREENSHOT_DIR

__all__ = [
    "ActionResult",
    "ActionType",
    "AssertionType",
    "SequenceResult",
    "Session",
    "DiagnosticsBuffer",
    "NetworkCorrelator",
    "SessionDiagnostics",
    "SessionRegistry",
    "perform_action",
    "evaluate_assertion",
    "SequenceRunner",
    "run_sequence",
    "PlaywrightBrowserManager",
    "create_tools",
    "handle_tool_call",
    "DEFAULT_PORT",
    "DEFAULT_HOST",
    "SCREENSHOT_DIR",
]
