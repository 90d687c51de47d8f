"""
Tests for single page actions.

Run with: pytest tests/test_actions.py -v
"""
import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from browser_mcp.actions import ACTION_HANDLERS, perform_action
from browser_mcp.config import HIGHLIGHT_FLASHES, NAVIGATION_WAIT_UNTIL, SCROLL_AMOUNT
from browser_mcp.errors import ElementNotFoundError, MissingParameterError, UnknownActionError
from browser_mcp.models import ActionParams, ActionType


def action(type, **kwargs) -> ActionParams:
    return ActionParams(type=type, **kwargs)


class TestDispatch:
    def test_every_action_type_has_a_handler(self):
        assert set(ACTION_HANDLERS) == set(ActionType)

    @pytest.mark.asyncio
    async def test_unknown_action_type(self, page):
        with pytest.raises(UnknownActionError):
            await perform_action(page, action("teleport"))
        assert page.calls == []

    @pytest.mark.asyncio
    async def test_accepts_enum_member(self, page):
        result = await perform_action(page, action(ActionType.BACK))
        assert result.action == "back"


class TestNavigation:
    @pytest.mark.asyncio
    async def test_navigate_reports_url_and_title(self, page):
        result = await perform_action(page, action("navigate", url="https://example.test/next"))

        assert page.called("goto") == [("goto", "https://example.test/next", NAVIGATION_WAIT_UNTIL)]
        assert result.to_dict() == {
            "success": True,
            "action": "navigate",
            "url": "https://example.test/next",
            "title": "Example",
        }

    @pytest.mark.asyncio
    async def test_navigate_requires_url(self, page):
        with pytest.raises(MissingParameterError):
            await perform_action(page, action("navigate"))
        assert page.calls == []

    @pytest.mark.asyncio
    async def test_back_and_forward(self, page):
        await perform_action(page, action("navigate", url="https://example.test/2"))

        back = await perform_action(page, action("back"))
        assert back.url == "https://example.test/"
        assert page.called("go_back") == [("go_back", NAVIGATION_WAIT_UNTIL)]

        forward = await perform_action(page, action("forward"))
        assert forward.url == "https://example.test/2"
        assert forward.title == "Example"


class TestClick:
    @pytest.mark.asyncio
    async def test_click_that_navigates_reports_url(self, page):
        page.add_element("a.next")
        page.links["a.next"] = "https://example.test/page-2"

        result = await perform_action(page, action("click", selector="a.next"))

        assert result.url == "https://example.test/page-2"
        assert page.called("wait_for_load_state") == [("wait_for_load_state", NAVIGATION_WAIT_UNTIL)]

    @pytest.mark.asyncio
    async def test_click_without_navigation_leaves_url_unset(self, page):
        page.add_element("#toggle")

        result = await perform_action(page, action("click", selector="#toggle"))

        assert result.url is None
        assert "url" not in result.to_dict()
        assert page.url == "https://example.test/"

    @pytest.mark.asyncio
    async def test_settle_timeout_does_not_fail_click(self, page):
        page.add_element("#slow")
        page.settle_error = PlaywrightTimeoutError("Timeout 30000ms exceeded.")

        result = await perform_action(page, action("click", selector="#slow"))
        assert result.success

    @pytest.mark.asyncio
    async def test_click_requires_selector(self, page):
        with pytest.raises(MissingParameterError):
            await perform_action(page, action("click", selector=""))

    @pytest.mark.asyncio
    async def test_click_on_missing_element_propagates(self, page):
        with pytest.raises(PlaywrightTimeoutError):
            await perform_action(page, action("click", selector="#missing"))


class TestFormControls:
    @pytest.mark.asyncio
    async def test_fill(self, page):
        field = page.add_element("#email")

        result = await perform_action(page, action("fill", selector="#email", value="a@b.test"))

        assert field.value == "a@b.test"
        assert result.to_dict() == {"success": True, "action": "fill", "selector": "#email"}

    @pytest.mark.asyncio
    async def test_fill_without_value_fails_before_touching_page(self, page):
        page.add_element("#email")

        with pytest.raises(MissingParameterError) as exc_info:
            await perform_action(page, action("fill", selector="#email"))

        assert exc_info.value.parameter == "value"
        assert page.calls == []

    @pytest.mark.asyncio
    async def test_fill_accepts_empty_string(self, page):
        field = page.add_element("#email", value="old")
        await perform_action(page, action("fill", selector="#email", value=""))
        assert field.value == ""

    @pytest.mark.asyncio
    async def test_select(self, page):
        field = page.add_element("select#country")
        await perform_action(page, action("select", selector="select#country", value="NZ"))
        assert field.value == "NZ"

    @pytest.mark.asyncio
    async def test_select_requires_value(self, page):
        with pytest.raises(MissingParameterError):
            await perform_action(page, action("select", selector="select#country"))

    @pytest.mark.asyncio
    async def test_check_and_uncheck(self, page):
        box = page.add_element("#terms")

        await perform_action(page, action("check", selector="#terms"))
        assert box.checked
        result = await perform_action(page, action("uncheck", selector="#terms"))
        assert not box.checked
        assert result.selector == "#terms"


class TestPress:
    @pytest.mark.asyncio
    async def test_press_on_element_defaults_to_enter(self, page):
        page.add_element("#search")
        page.links["#search"] = "https://example.test/results"

        result = await perform_action(page, action("press", selector="#search"))

        assert page.called("press") == [("press", "#search", "Enter")]
        assert result.url == "https://example.test/results"

    @pytest.mark.asyncio
    async def test_press_globally_uses_value_as_key(self, page):
        result = await perform_action(page, action("press", value="Escape"))

        assert page.called("keyboard.press") == [("keyboard.press", "Escape")]
        assert result.url is None

    @pytest.mark.asyncio
    async def test_press_needs_selector_or_key(self, page):
        with pytest.raises(MissingParameterError):
            await perform_action(page, action("press"))
        assert page.calls == []


class TestScroll:
    @pytest.mark.asyncio
    async def test_scroll_page_down_by_default(self, page):
        result = await perform_action(page, action("scroll"))

        assert page.called("evaluate") == [("evaluate", SCROLL_AMOUNT)]
        assert result.direction == "down"

    @pytest.mark.asyncio
    async def test_scroll_page_up(self, page):
        result = await perform_action(page, action("scroll", value="up"))

        assert page.called("evaluate") == [("evaluate", -SCROLL_AMOUNT)]
        assert result.direction == "up"

    @pytest.mark.asyncio
    async def test_scroll_element(self, page):
        panel = page.add_element("#panel")

        await perform_action(page, action("scroll", selector="#panel", value="up"))

        assert panel.evaluations[0][1] == -SCROLL_AMOUNT
        assert page.called("evaluate") == []

    @pytest.mark.asyncio
    async def test_scroll_missing_element_is_a_no_op(self, page):
        result = await perform_action(page, action("scroll", selector="#nothing"))
        assert result.success
        assert page.called("evaluate") == []


class TestHighlight:
    @pytest.mark.asyncio
    async def test_highlight_flashes_element(self, page):
        target = page.add_element("#hero")

        result = await perform_action(page, action("highlight", selector="#hero"))

        assert result.to_dict() == {"success": True, "action": "highlight", "selector": "#hero"}
        _, options = target.evaluations[0]
        assert options["flashes"] == HIGHLIGHT_FLASHES

    @pytest.mark.asyncio
    async def test_highlight_missing_element(self, page):
        with pytest.raises(ElementNotFoundError):
            await perform_action(page, action("highlight", selector="#missing"))

    @pytest.mark.asyncio
    async def test_highlight_requires_selector(self, page):
        with pytest.raises(MissingParameterError):
            await perform_action(page, action("highlight"))
