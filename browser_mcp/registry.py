"""
Session registry

Owns every open session and the single Playwright/Chromium instance they
share. The browser starts with the first session and stops when the last one
closes.
"""
import asyncio
import logging
from typing import Dict, List, Optional, Set

from playwright.async_api import Browser, Playwright, async_playwright

from .config import NAVIGATION_WAIT_UNTIL, VIEWPORT
from .diagnostics import SessionDiagnostics
from .errors import DuplicateSessionError, SessionNotFoundError
from .models import Session

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Named browser sessions over one shared browser"""

    def __init__(self, headless: bool = True):
        self.headless = headless
        self.sessions: Dict[str, Session] = {}
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._opening: Set[str] = set()
        # sessions open or being opened; the browser runs while this is > 0
        self._refs = 0
        self._lock = asyncio.Lock()

    @property
    def engine_running(self) -> bool:
        return self.browser is not None

    # Engine lifecycle

    async def _ensure_browser(self) -> Browser:
        if self.playwright is None:
            self.playwright = await async_playwright().start()
        if self.browser is None or not self.browser.is_connected():
            logger.info(f"Launching chromium (headless={self.headless})")
            self.browser = await self.playwright.chromium.launch(headless=self.headless)
        return self.browser

    async def _stop_engine(self):
        browser, playwright = self.browser, self.playwright
        self.browser = None
        self.playwright = None
        try:
            if browser is not None:
                await browser.close()
        finally:
            if playwright is not None:
                await playwright.stop()
        logger.info("Browser engine stopped")

    async def _acquire(self, name: str) -> Browser:
        async with self._lock:
            if name in self.sessions or name in self._opening:
                raise DuplicateSessionError(name)
            self._opening.add(name)
            self._refs += 1
            try:
                return await self._ensure_browser()
            except Exception:
                self._opening.discard(name)
                self._refs -= 1
                raise

    async def _release(self):
        async with self._lock:
            self._refs -= 1
            if self._refs == 0:
                await self._stop_engine()

    # Session operations

    async def open(self, name: str, url: str) -> Session:
        """Open a new tab named ``name`` and navigate it to ``url``."""
        browser = await self._acquire(name)
        page = None
        try:
            page = await browser.new_page(viewport=VIEWPORT)
            diagnostics = SessionDiagnostics()
            diagnostics.attach(page)
            await page.goto(url, wait_until=NAVIGATION_WAIT_UNTIL)
        except Exception:
            logger.warning(f"Failed to open session '{name}' at {url}")
            try:
                if page is not None:
                    await page.close()
            finally:
                self._opening.discard(name)
                await self._release()
            raise

        session = Session(name=name, page=page, diagnostics=diagnostics)
        self._opening.discard(name)
        self.sessions[name] = session
        logger.info(f"Opened session '{name}' at {page.url}")
        return session

    def get(self, name: str) -> Optional[Session]:
        return self.sessions.get(name)

    def require(self, name: str) -> Session:
        """Like ``get`` but raises ``SessionNotFoundError`` listing open names."""
        session = self.sessions.get(name)
        if session is None:
            raise SessionNotFoundError(name, self.list())
        return session

    def list(self) -> List[str]:
        return list(self.sessions.keys())

    async def close(self, name: str) -> bool:
        """Close a session; returns False if no such session was open."""
        session = self.sessions.pop(name, None)
        if session is None:
            return False
        try:
            await session.page.close()
        finally:
            await self._release()
        logger.info(f"Closed session '{name}'")
        return True

    async def shutdown_all(self):
        """Close every session and the browser. Safe to call with none open."""
        sessions = list(self.sessions.items())
        self.sessions.clear()
        try:
            for name, session in sessions:
                try:
                    await session.page.close()
                    logger.info(f"Closed session '{name}'")
                except Exception:
                    logger.warning(f"Failed to close session '{name}'", exc_info=True)
        finally:
            async with self._lock:
                self._refs = len(self._opening)
                if self.playwright is not None or self.browser is not None:
                    await self._stop_engine()
