"""
Assertion evaluator

Checks a declared condition against the current page. Returns an
``AssertionOutcome``; a condition that simply does not hold is a failed
outcome, not an exception. Bad parameters raise usage errors and page
failures raise ``CollaboratorError``.
"""
import logging
from typing import Any, Dict

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from .errors import CollaboratorError, MissingParameterError, UnknownAssertionError
from .models import AssertionOutcome, AssertionType

logger = logging.getLogger(__name__)

SELECTOR_ASSERTIONS = {
    AssertionType.ELEMENT_EXISTS,
    AssertionType.ELEMENT_NOT_EXISTS,
    AssertionType.ELEMENT_VISIBLE,
    AssertionType.ELEMENT_HIDDEN,
    AssertionType.TEXT_CONTAINS,
    AssertionType.TEXT_EQUALS,
    AssertionType.VALUE_EQUALS,
    AssertionType.ELEMENT_COUNT,
}

VALUE_ASSERTIONS = {
    AssertionType.TEXT_CONTAINS,
    AssertionType.TEXT_EQUALS,
    AssertionType.VALUE_EQUALS,
    AssertionType.URL_CONTAINS,
    AssertionType.TITLE_CONTAINS,
    AssertionType.ELEMENT_COUNT,
}


async def _check(page: Page, kind: AssertionType, selector: str, expected: Any):
    """Returns (passed, actual)."""
    if kind == AssertionType.URL_CONTAINS:
        return expected in page.url, page.url
    if kind == AssertionType.TITLE_CONTAINS:
        title = await page.title()
        return expected in title, title
    if kind == AssertionType.ELEMENT_COUNT:
        count = len(await page.query_selector_all(selector))
        return count == int(expected), count

    element = await page.query_selector(selector)
    if kind == AssertionType.ELEMENT_EXISTS:
        return element is not None, element is not None
    if kind == AssertionType.ELEMENT_NOT_EXISTS:
        return element is None, element is not None
    if kind == AssertionType.ELEMENT_HIDDEN:
        visible = element is not None and await element.is_visible()
        return not visible, visible

    if element is None:
        return False, None
    if kind == AssertionType.ELEMENT_VISIBLE:
        visible = await element.is_visible()
        return visible, visible
    if kind == AssertionType.VALUE_EQUALS:
        value = await element.input_value()
        return value == expected, value

    text = (await element.inner_text()).strip()
    if kind == AssertionType.TEXT_EQUALS:
        return text == expected, text
    return expected in text, text


async def evaluate_assertion(page: Page, params: Dict[str, Any]) -> AssertionOutcome:
    """Evaluate one assertion described by ``params`` (``assert``/``type``, ``selector``, ``value``)."""
    name = params.get("assert") or params.get("type") or ""
    try:
        kind = AssertionType(name)
    except ValueError:
        raise UnknownAssertionError(name) from None

    selector = params.get("selector")
    expected = params.get("value")
    if kind in SELECTOR_ASSERTIONS and not selector:
        raise MissingParameterError(kind.value, "selector")
    if kind in VALUE_ASSERTIONS and expected is None:
        raise MissingParameterError(kind.value, "value")
    if kind == AssertionType.ELEMENT_COUNT:
        try:
            int(expected)
        except (TypeError, ValueError):
            raise MissingParameterError(kind.value, "integer value") from None
    elif expected is not None:
        expected = str(expected)

    try:
        passed, actual = await _check(page, kind, selector, expected)
    except PlaywrightError as e:
        raise CollaboratorError("assertion", f"{kind.value} failed: {e.message}", selector=selector) from e

    target = f" {selector}" if selector else ""
    if passed:
        message = f"{kind.value}{target} passed"
    elif expected is None:
        message = f"{kind.value}{target} failed"
    else:
        message = f"{kind.value}{target} failed: expected {expected!r}, got {actual!r}"
    logger.debug(message)
    return AssertionOutcome(assertion=kind.value, passed=passed, message=message, actual=actual)
