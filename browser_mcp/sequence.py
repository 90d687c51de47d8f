"""
Sequence runner

Runs an ordered list of action and assertion steps against one session. The
first failing step aborts the run; every outcome, including the failing one,
is reported along with where the page ended up.
"""
import logging
from typing import Any, Dict, List

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from .actions import perform_action
from .assertions import evaluate_assertion
from .errors import CollaboratorError, ToolUsageError
from .models import (
    ActionParams,
    RunState,
    SequenceResult,
    SequenceStep,
    Session,
    StepKind,
    StepOutcome,
)

logger = logging.getLogger(__name__)


def parse_steps(steps: List[Dict[str, Any]]) -> List[SequenceStep]:
    """Validate step shapes up front; a malformed step fails the whole request."""
    if not isinstance(steps, list):
        raise ToolUsageError("steps must be a list")

    parsed = []
    for index, raw in enumerate(steps):
        if not isinstance(raw, dict):
            raise ToolUsageError(f"Step {index} must be an object")
        has_action = bool(raw.get("action"))
        has_assert = bool(raw.get("assert"))
        if has_action == has_assert:
            raise ToolUsageError(f"Step {index} needs exactly one of 'action' or 'assert'")
        if has_action:
            parsed.append(SequenceStep(index, StepKind.ACTION, str(raw["action"]), dict(raw)))
        else:
            parsed.append(SequenceStep(index, StepKind.ASSERTION, str(raw["assert"]), dict(raw)))
    return parsed


class SequenceRunner:
    """Runs one sequence once: NOT_STARTED -> RUNNING -> COMPLETED | ABORTED."""

    def __init__(self, session: Session, steps: List[Dict[str, Any]]):
        self.session = session
        self.steps = parse_steps(steps)
        self.state = RunState.NOT_STARTED
        self.outcomes: List[StepOutcome] = []

    async def run(self) -> SequenceResult:
        if self.state != RunState.NOT_STARTED:
            raise ToolUsageError("Sequence has already been run")
        self.state = RunState.RUNNING
        page = self.session.page

        for step in self.steps:
            outcome = await self._run_step(page, step)
            self.outcomes.append(outcome)
            if not outcome.success:
                self.state = RunState.ABORTED
                logger.info(
                    f"Sequence on '{self.session.name}' aborted at step {step.index} "
                    f"({step.name}): {outcome.error}"
                )
                break
        else:
            self.state = RunState.COMPLETED

        return SequenceResult(
            success=self.state == RunState.COMPLETED,
            completed=len(self.outcomes),
            total=len(self.steps),
            steps=tuple(self.outcomes),
            final_state=await self._final_state(page),
        )

    async def _run_step(self, page: Page, step: SequenceStep) -> StepOutcome:
        try:
            if step.kind == StepKind.ACTION:
                result = await perform_action(page, ActionParams.from_dict(step.params))
                return StepOutcome(step.index, step.kind, step.name, True, detail=result.to_dict())

            outcome = await evaluate_assertion(page, step.params)
            return StepOutcome(
                step.index,
                step.kind,
                step.name,
                outcome.passed,
                detail=outcome.to_dict(),
                error=None if outcome.passed else outcome.message,
                collaborator=None if outcome.passed else "assertion",
            )
        except CollaboratorError as e:
            return StepOutcome(step.index, step.kind, step.name, False,
                               error=e.message, collaborator=e.collaborator)
        except Exception as e:
            logger.warning(f"Step {step.index} ({step.name}) raised: {e}")
            collaborator = "assertion" if step.kind == StepKind.ASSERTION else None
            return StepOutcome(step.index, step.kind, step.name, False,
                               error=str(e), collaborator=collaborator)

    async def _final_state(self, page: Page) -> Dict[str, Any]:
        state = {"session": self.session.name, "url": page.url, "title": None}
        try:
            state["title"] = await page.title()
        except PlaywrightError as e:
            logger.debug(f"Could not read title for final state: {e.message}")
        return state


async def run_sequence(session: Session, steps: List[Dict[str, Any]]) -> SequenceResult:
    return await SequenceRunner(session, steps).run()
