import asyncio
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from deckgate.schemas.ai_check import AiVerdict
from deckgate.schemas.config import AiCheck, Config
from deckgate.schemas.deck import Deck, TestResult
from deckgate.services.ai_rules import AiRuleEvaluator, build_deck_summary, fail_open
from deckgate.services.deterministic import run_deterministic_checks

logger = logging.getLogger(__name__)

ResultCallback = Callable[[TestResult], None]


def all_passed(tests: list[TestResult]) -> bool:
    return bool(tests) and all(t.status == "pass" for t in tests)


def ai_result(check: AiCheck, verdict: AiVerdict) -> TestResult:
    return TestResult(
        id=f"ai:{check.id}",
        label=check.label,
        type="ai",
        status="pass" if verdict.passed else "fail",
        details=list(verdict.reasons),
    )


@dataclass
class ValidationRun:
    run_id: str
    deck_id: str
    tests: list[TestResult] = field(default_factory=list)
    stale: bool = False

    @property
    def passed(self) -> bool:
        return not self.stale and all_passed(self.tests)


class ValidationPipeline:
    """Runs every rule for a deck and keeps late results out of newer runs.

    Deterministic rules are computed as one batch. AI rules then fill
    pre-allocated slots concurrently; a slot is only written while the run is
    still the latest one for its deck. A deck stops being tracked once its
    latest run finishes.
    """

    def __init__(self, ai_evaluator: AiRuleEvaluator):
        self.ai = ai_evaluator
        self._current: dict[str, str] = {}

    @property
    def active_runs(self) -> int:
        return len(self._current)

    def is_current(self, deck_id: str, run_id: str) -> bool:
        return self._current.get(deck_id) == run_id

    def _start(self, deck: Deck) -> str:
        run_id = uuid.uuid4().hex
        previous = self._current.get(deck.id)
        if previous:
            logger.info("deck %s: run %s supersedes %s", deck.id, run_id, previous)
        self._current[deck.id] = run_id
        return run_id

    async def run(
        self,
        deck: Deck,
        config: Config,
        on_result: ResultCallback | None = None,
        platform: str | None = None,
    ) -> ValidationRun:
        run_id = self._start(deck)
        checks = list(config.ai_checks)

        tests = run_deterministic_checks(deck, config)
        offset = len(tests)
        tests.extend(
            TestResult(id=f"ai:{c.id}", label=c.label, type="ai", status="running") for c in checks
        )
        deck.tests = tests
        run = ValidationRun(run_id=run_id, deck_id=deck.id, tests=tests)
        if on_result:
            for t in tests[:offset]:
                on_result(t)

        summary = build_deck_summary(deck, platform=platform)

        async def _evaluate(slot: int, check: AiCheck) -> None:
            try:
                verdict = await self.ai.evaluate(check, summary)
            except Exception as exc:  # noqa: BLE001
                logger.warning("ai rule %s raised, defaulting to pass: %s", check.id, exc)
                verdict = fail_open(f"AI check failed; defaulted to pass. ({exc!s})")

            if not self.is_current(deck.id, run_id):
                logger.info("deck %s: discarding late result %s from stale run %s", deck.id, check.id, run_id)
                return
            tests[slot] = ai_result(check, verdict)
            if on_result:
                on_result(tests[slot])

        await asyncio.gather(*(_evaluate(offset + i, c) for i, c in enumerate(checks)))

        run.stale = not self.is_current(deck.id, run_id)
        if not run.stale:
            del self._current[deck.id]
        return run
