"""
MCP tool definitions and call handling
"""
import inspect
import json
import logging
from typing import Any, Dict, List

from mcp.types import TextContent, Tool
from playwright.async_api import Error as PlaywrightError

from .errors import BrowserMCPError, ToolUsageError
from .models import ActionType, AssertionType

logger = logging.getLogger(__name__)

SESSION_PROPERTY = {"type": "string", "description": "The session name"}


def create_tools() -> List[Tool]:
    """Create and return every browser tool"""
    return [
        Tool(
            name="session_open",
            description="Open a new named browser session (tab) and navigate it to a URL. The browser starts automatically with the first session.",
            inputSchema={
                "type": "object",
                "properties": {
                    "session": {"type": "string", "description": "Unique name for the new session"},
                    "url": {"type": "string", "description": "URL to open"}
                },
                "required": ["session", "url"]
            }
        ),
        Tool(
            name="session_close",
            description="Close a browser session. The browser shuts down when the last session closes.",
            inputSchema={
                "type": "object",
                "properties": {
                    "session": SESSION_PROPERTY
                },
                "required": ["session"]
            }
        ),
        Tool(
            name="session_list",
            description="List open browser sessions",
            inputSchema={
                "type": "object",
                "properties": {}
            }
        ),
        Tool(
            name="action",
            description="""Perform one interaction on a session's page.

- navigate (url), back, forward: change location, returns url and title
- click (selector): click an element, returns url if it navigated
- fill / select (selector, value): set an input or choose an option
- check / uncheck (selector): toggle a checkbox or radio
- press (value = key, optional selector; defaults to Enter on a selector)
- scroll (value = "up" | "down", optional selector)
- highlight (selector): flash an outline around an element for visual debugging""",
            inputSchema={
                "type": "object",
                "properties": {
                    "session": SESSION_PROPERTY,
                    "type": {"type": "string", "enum": [a.value for a in ActionType], "description": "Action type"},
                    "selector": {"type": "string", "description": "CSS or Playwright selector of the target element"},
                    "value": {"type": "string", "description": "Value to fill/select, key to press, or scroll direction"},
                    "url": {"type": "string", "description": "URL for navigate"}
                },
                "required": ["session", "type"]
            }
        ),
        Tool(
            name="assert",
            description="Check a condition on a session's page (element exists, text contains, URL contains, ...)",
            inputSchema={
                "type": "object",
                "properties": {
                    "session": SESSION_PROPERTY,
                    "type": {"type": "string", "enum": [a.value for a in AssertionType], "description": "Assertion type"},
                    "selector": {"type": "string", "description": "Selector of the element to check"},
                    "value": {"type": "string", "description": "Expected text, value, URL fragment, title fragment or count"}
                },
                "required": ["session", "type"]
            }
        ),
        Tool(
            name="sequence",
            description="""Run an ordered list of steps against a session. Stops at the first failing step and reports every attempted step plus the final page state.

Action step: {"action": "fill", "selector": "#email", "value": "a@b.c"}
Assertion step: {"assert": "text_contains", "selector": ".flash", "value": "Welcome"}""",
            inputSchema={
                "type": "object",
                "properties": {
                    "session": SESSION_PROPERTY,
                    "steps": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "action": {"type": "string", "enum": [a.value for a in ActionType]},
                                "assert": {"type": "string", "enum": [a.value for a in AssertionType]},
                                "selector": {"type": "string"},
                                "value": {"type": "string"},
                                "url": {"type": "string"}
                            }
                        },
                        "description": "Steps to run in order"
                    }
                },
                "required": ["session", "steps"]
            }
        ),
        Tool(
            name="diagnostics",
            description="""Get console messages and network requests captured for a session. Useful for debugging JavaScript errors and failed requests.

- "console": recent console messages (log, warning, error, ...)
- "network": recent requests with status codes and timing
- "all": both""",
            inputSchema={
                "type": "object",
                "properties": {
                    "session": SESSION_PROPERTY,
                    "type": {"type": "string", "enum": ["console", "network", "all"], "description": "What to retrieve", "default": "all"},
                    "level": {"type": "string", "enum": ["error", "warning", "log", "info", "debug"], "description": "Filter console entries by level"},
                    "limit": {"type": "integer", "description": "Maximum entries per type, most recent first", "default": 50},
                    "clear": {"type": "boolean", "description": "Clear the buffers after reading", "default": False}
                },
                "required": ["session"]
            }
        ),
        Tool(
            name="page_structure",
            description="Get the page's landmarks, headings, forms and interactive elements",
            inputSchema={
                "type": "object",
                "properties": {
                    "session": SESSION_PROPERTY,
                    "include": {
                        "type": "array",
                        "items": {"type": "string", "enum": ["landmarks", "headings", "forms", "interactive"]},
                        "description": "Parts to return (default: all)"
                    },
                    "selector": {"type": "string", "description": "Limit the query to this element"}
                },
                "required": ["session"]
            }
        ),
        Tool(
            name="screenshot",
            description="Save a PNG screenshot of the page or one element",
            inputSchema={
                "type": "object",
                "properties": {
                    "session": SESSION_PROPERTY,
                    "filename": {"type": "string", "description": "Screenshot file name (optional)"},
                    "full_page": {"type": "boolean", "description": "Capture the full scrollable page", "default": False},
                    "selector": {"type": "string", "description": "Element selector (optional)"}
                },
                "required": ["session"]
            }
        ),
        Tool(
            name="describe",
            description="Use a vision model to describe what is visible on the page. Requires OPENAI_API_KEY or ANTHROPIC_API_KEY.",
            inputSchema={
                "type": "object",
                "properties": {
                    "session": SESSION_PROPERTY,
                    "selector": {"type": "string", "description": "Describe only this element"},
                    "full_page": {"type": "boolean", "description": "Capture the full page; ignored with selector", "default": False},
                    "prompt": {"type": "string", "description": "Specific question about the screenshot"}
                },
                "required": ["session"]
            }
        ),
    ]


async def call_tool(browser_manager, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Dispatch a tool call; errors come back as ``{"error": ...}`` payloads."""
    tool_methods = {
        "session_open": browser_manager.session_open,
        "session_close": browser_manager.session_close,
        "session_list": browser_manager.session_list,
        "action": browser_manager.browser_action,
        "assert": browser_manager.browser_assert,
        "sequence": browser_manager.browser_sequence,
        "diagnostics": browser_manager.browser_diagnostics,
        "page_structure": browser_manager.browser_page_structure,
        "screenshot": browser_manager.browser_screenshot,
        "describe": browser_manager.browser_describe,
    }

    if name not in tool_methods:
        raise ValueError(f"Unknown tool: {name}")

    method = tool_methods[name]
    arguments = arguments or {}
    try:
        inspect.signature(method).bind(**arguments)
    except TypeError as e:
        logger.warning(f"Invalid arguments for {name}: {e}")
        return ToolUsageError(f"Invalid arguments for {name}: {e}").to_dict()

    try:
        return await method(**arguments)
    except BrowserMCPError as e:
        logger.warning(f"{name} failed: {e}")
        return e.to_dict()
    except PlaywrightError as e:
        logger.warning(f"{name} failed in browser: {e.message}")
        return {"error": e.message}


async def handle_tool_call(browser_manager, name: str, arguments: Dict[str, Any]) -> List[TextContent]:
    """Handle a tool call"""
    result = await call_tool(browser_manager, name, arguments)
    return [
        TextContent(
            type="text",
            text=json.dumps(result, ensure_ascii=False, indent=2, default=str)
        )
    ]
