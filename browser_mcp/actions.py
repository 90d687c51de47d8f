"""
Single page interactions

``perform_action`` validates an action's parameters, applies it to a page and
reports what happened. Nothing here retries; Playwright errors reach the
caller unchanged.
"""
import logging
from typing import Awaitable, Callable, Dict

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import (
    HIGHLIGHT_FLASHES,
    HIGHLIGHT_OUTLINE,
    NAVIGATION_WAIT_UNTIL,
    SCROLL_AMOUNT,
)
from .errors import ElementNotFoundError, MissingParameterError, UnknownActionError
from .models import ActionParams, ActionResult, ActionType

logger = logging.getLogger(__name__)

SCROLL_ELEMENT_JS = "(el, amount) => el.scrollBy(0, amount)"
SCROLL_WINDOW_JS = "amount => window.scrollBy(0, amount)"

FLASH_JS = """
async (el, opts) => {
    const sleep = ms => new Promise(r => setTimeout(r, ms));
    el.scrollIntoView({ behavior: 'smooth', block: 'center' });
    const previousOutline = el.style.outline;
    const previousTransition = el.style.transition;
    el.style.transition = 'outline 0.15s ease-in-out';
    el.style.outline = opts.outline;
    for (let i = 0; i < opts.flashes; i++) {
        await sleep(200);
        el.style.outline = 'none';
        await sleep(200);
        el.style.outline = opts.outline;
    }
    await sleep(300);
    el.style.outline = previousOutline;
    el.style.transition = previousTransition;
}
"""


def _require(params: ActionParams, name: str):
    value = getattr(params, name)
    if value is None or (name != "value" and value == ""):
        raise MissingParameterError(params.type, name)
    return value


async def _settle(page: Page) -> bool:
    """Wait for a navigation triggered by the last input to parse; never raises on timeout."""
    try:
        await page.wait_for_load_state(NAVIGATION_WAIT_UNTIL)
    except PlaywrightTimeoutError:
        logger.debug(f"Page did not settle after input on {page.url}")
        return False
    return True


async def _navigated(page: Page, result: ActionResult) -> ActionResult:
    result.url = page.url
    result.title = await page.title()
    return result


async def _navigate(page: Page, params: ActionParams) -> ActionResult:
    url = _require(params, "url")
    await page.goto(url, wait_until=NAVIGATION_WAIT_UNTIL)
    return await _navigated(page, ActionResult(action=params.type))


async def _back(page: Page, params: ActionParams) -> ActionResult:
    await page.go_back(wait_until=NAVIGATION_WAIT_UNTIL)
    return await _navigated(page, ActionResult(action=params.type))


async def _forward(page: Page, params: ActionParams) -> ActionResult:
    await page.go_forward(wait_until=NAVIGATION_WAIT_UNTIL)
    return await _navigated(page, ActionResult(action=params.type))


async def _click(page: Page, params: ActionParams) -> ActionResult:
    selector = _require(params, "selector")
    before = page.url
    await page.click(selector)
    await _settle(page)
    result = ActionResult(action=params.type)
    if page.url != before:
        result.url = page.url
    return result


async def _fill(page: Page, params: ActionParams) -> ActionResult:
    selector = _require(params, "selector")
    value = _require(params, "value")
    await page.fill(selector, value)
    return ActionResult(action=params.type, selector=selector)


async def _select(page: Page, params: ActionParams) -> ActionResult:
    selector = _require(params, "selector")
    value = _require(params, "value")
    await page.select_option(selector, value)
    return ActionResult(action=params.type, selector=selector)


async def _check(page: Page, params: ActionParams) -> ActionResult:
    selector = _require(params, "selector")
    await page.check(selector)
    return ActionResult(action=params.type, selector=selector)


async def _uncheck(page: Page, params: ActionParams) -> ActionResult:
    selector = _require(params, "selector")
    await page.uncheck(selector)
    return ActionResult(action=params.type, selector=selector)


async def _press(page: Page, params: ActionParams) -> ActionResult:
    before = page.url
    if params.selector:
        await page.press(params.selector, params.value or "Enter")
    else:
        if not params.value:
            raise MissingParameterError(params.type, "selector or value (key)")
        await page.keyboard.press(params.value)
    await _settle(page)
    result = ActionResult(action=params.type)
    if page.url != before:
        result.url = page.url
    return result


async def _scroll(page: Page, params: ActionParams) -> ActionResult:
    direction = params.value or "down"
    amount = -SCROLL_AMOUNT if direction == "up" else SCROLL_AMOUNT
    if params.selector:
        element = await page.query_selector(params.selector)
        if element is None:
            logger.debug(f"Scroll target {params.selector} not found, nothing scrolled")
        else:
            await element.evaluate(SCROLL_ELEMENT_JS, amount)
    else:
        await page.evaluate(SCROLL_WINDOW_JS, amount)
    return ActionResult(action=params.type, direction=direction)


async def _highlight(page: Page, params: ActionParams) -> ActionResult:
    selector = _require(params, "selector")
    element = await page.query_selector(selector)
    if element is None:
        raise ElementNotFoundError(selector)
    await element.evaluate(FLASH_JS, {"outline": HIGHLIGHT_OUTLINE, "flashes": HIGHLIGHT_FLASHES})
    return ActionResult(action=params.type, selector=selector)


ACTION_HANDLERS: Dict[ActionType, Callable[[Page, ActionParams], Awaitable[ActionResult]]] = {
    ActionType.NAVIGATE: _navigate,
    ActionType.BACK: _back,
    ActionType.FORWARD: _forward,
    ActionType.CLICK: _click,
    ActionType.FILL: _fill,
    ActionType.SELECT: _select,
    ActionType.CHECK: _check,
    ActionType.UNCHECK: _uncheck,
    ActionType.PRESS: _press,
    ActionType.SCROLL: _scroll,
    ActionType.HIGHLIGHT: _highlight,
}


async def perform_action(page: Page, params: ActionParams) -> ActionResult:
    """Apply one action to ``page``."""
    try:
        action = ActionType(params.type)
    except ValueError:
        raise UnknownActionError(params.type) from None
    params.type = action.value
    logger.debug(f"Performing {action.value} on {page.url}")
    return await ACTION_HANDLERS[action](page, params)
