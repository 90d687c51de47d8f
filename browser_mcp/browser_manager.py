"""
Playwright browser manager
Tool-facing operations over named sessions
"""
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from .actions import perform_action
from .assertions import evaluate_assertion
from .config import DEFAULT_DIAGNOSTICS_LIMIT, SCREENSHOT_DIR
from .errors import ElementNotFoundError, MissingParameterError, ToolUsageError
from .models import ActionParams
from .page_info import extract_page_structure
from .registry import SessionRegistry
from .sequence import SequenceRunner
from . import vision

logger = logging.getLogger(__name__)


class PlaywrightBrowserManager:
    """Playwright browser manager"""

    def __init__(self, headless: bool = True, screenshot_dir: str = SCREENSHOT_DIR):
        self.registry = SessionRegistry(headless=headless)
        self.screenshot_dir = Path(screenshot_dir)

    async def stop(self):
        """Close every session and the browser"""
        await self.registry.shutdown_all()

    # Session management
    async def session_open(self, session: str, url: str) -> Dict[str, Any]:
        """Open a named session at a URL"""
        if not session:
            raise MissingParameterError("session_open", "session")
        if not url:
            raise MissingParameterError("session_open", "url")
        opened = await self.registry.open(session, url)
        return {
            **opened.to_dict(),
            "title": await opened.page.title(),
            "status": "opened",
        }

    async def session_close(self, session: str) -> Dict[str, Any]:
        """Close a named session"""
        closed = await self.registry.close(session)
        result = {"session": session, "closed": closed}
        if not closed:
            result["available_sessions"] = self.registry.list()
        return result

    async def session_list(self) -> Dict[str, Any]:
        """List open sessions"""
        sessions = [s.to_dict() for s in self.registry.sessions.values()]
        return {"sessions": sessions, "count": len(sessions)}

    # Interaction
    async def browser_action(
        self,
        session: str,
        type: str,
        selector: Optional[str] = None,
        value: Optional[str] = None,
        url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Perform one action on a session's page"""
        page = self.registry.require(session).page
        result = await perform_action(page, ActionParams(type=type, selector=selector, value=value, url=url))
        return {"session": session, **result.to_dict()}

    async def browser_assert(
        self,
        session: str,
        type: str,
        selector: Optional[str] = None,
        value: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """Check one condition on a session's page"""
        page = self.registry.require(session).page
        outcome = await evaluate_assertion(page, {"assert": type, "selector": selector, "value": value})
        return {"session": session, **outcome.to_dict()}

    async def browser_sequence(self, session: str, steps: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Run an ordered list of actions and assertions"""
        runner = SequenceRunner(self.registry.require(session), steps)
        result = await runner.run()
        return {"session": session, "state": runner.state.value, **result.to_dict()}

    # Diagnostics and page information
    async def browser_diagnostics(
        self,
        session: str,
        type: str = "all",
        level: Optional[str] = None,
        limit: int = DEFAULT_DIAGNOSTICS_LIMIT,
        clear: bool = False,
    ) -> Dict[str, Any]:
        """Read (and optionally clear) console and network buffers"""
        found = self.registry.require(session)
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ToolUsageError("limit must be a non-negative integer") from None
        if limit < 0:
            raise ToolUsageError("limit must be a non-negative integer")
        entries = found.diagnostics.read(type, level=level, limit=limit, clear=clear)
        return {"session": session, "type": type, **entries}

    async def browser_page_structure(
        self,
        session: str,
        include: Optional[List[str]] = None,
        selector: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Query landmarks, headings, forms and interactive elements"""
        page = self.registry.require(session).page
        structure = await extract_page_structure(page, include, selector)
        return {"session": session, **structure}

    async def browser_screenshot(
        self,
        session: str,
        filename: Optional[str] = None,
        full_page: bool = False,
        selector: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Save a PNG screenshot of the page or one element"""
        page = self.registry.require(session).page

        if filename is None:
            filename = f"screenshot-{uuid.uuid4().hex[:8]}.png"
        self.screenshot_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.screenshot_dir / Path(filename).name

        if selector:
            element = await page.query_selector(selector)
            if element is None:
                raise ElementNotFoundError(selector)
            await element.screenshot(path=str(filepath), type="png")
        else:
            await page.screenshot(path=str(filepath), full_page=full_page, type="png")

        logger.info(f"Saved screenshot of '{session}' to {filepath}")
        return {
            "session": session,
            "filename": filepath.name,
            "filepath": str(filepath),
            "status": "screenshot_taken",
        }

    async def browser_describe(
        self,
        session: str,
        selector: Optional[str] = None,
        full_page: bool = False,
        prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Describe what is visible on the page using a vision model"""
        if not vision.is_configured():
            return {"success": False, "error": vision.NOT_CONFIGURED}

        page = self.registry.require(session).page
        if selector:
            element = await page.query_selector(selector)
            if element is None:
                return {"success": False, "error": f"Element not found: {selector}"}
            image = await element.screenshot(type="png")
        else:
            image = await page.screenshot(type="png", full_page=full_page)

        result = await vision.describe_image(image, prompt)
        return {"session": session, **result.to_dict()}
