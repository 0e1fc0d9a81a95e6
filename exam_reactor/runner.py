"""Suite runner driving a staged reactor through a test plan."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from itertools import groupby

from exam_reactor.errors import ExamReactorError
from exam_reactor.listeners import RecordingListener, TestListener
from exam_reactor.models.description import TestDescription
from exam_reactor.models.result import TestResult
from exam_reactor.reactors.base import StagedReactor

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class SuiteResult:
    """Outcome of every test of a run, in execution order."""

    results: Sequence[TestResult]

    @property
    def passed(self) -> int:
        return sum(1 for result in self.results if result.status == "passed")

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if result.status == "failed")

    @property
    def errors(self) -> int:
        return sum(1 for result in self.results if result.status == "error")

    @property
    def successful(self) -> bool:
        """Whether every test passed."""
        return all(result.passed for result in self.results)


@dataclass(frozen=True, kw_only=True)
class SuiteRunner:
    """Runs a test plan class by class through a staged reactor."""

    reactor: StagedReactor
    listener: TestListener | None = None

    async def run(self, plan: Sequence[TestDescription]) -> SuiteResult:
        """Run the plan and return every result.

        The reactor hooks fire as ``set_up``, ``before_suite``, then per class
        ``before_class`` and per test ``before_test``/``after_test``, then
        ``after_class``, ``after_suite`` and ``tear_down``. An infrastructure
        failure of one test is reported as an ``error`` result and the run
        goes on.

        Args:
            plan: Test descriptions grouped by class, as produced by
                ``plan_descriptions``

        Returns:
            Results of the executable tests in the order they ran

        """
        recorder = RecordingListener()
        listener = _Tee(recorder=recorder, listener=self.listener)

        log.info("Running %d test node(s)", len(plan))
        await self.reactor.set_up()
        try:
            await self.reactor.before_suite()
            for class_name, descriptions in groupby(plan, key=_class_of):
                await self._run_class(class_name, list(descriptions), listener)
            await self.reactor.after_suite()
        finally:
            await self.reactor.tear_down()

        suite_result = SuiteResult(results=tuple(recorder.results))
        log.info(
            "Suite finished: %d passed, %d failed, %d error(s)",
            suite_result.passed,
            suite_result.failed,
            suite_result.errors,
        )
        return suite_result

    async def _run_class(
        self,
        class_name: str,
        descriptions: Sequence[TestDescription],
        listener: TestListener,
    ) -> None:
        log.debug("Running class %s", class_name)
        await self.reactor.before_class()
        try:
            for description in descriptions:
                if not description.is_executable:
                    continue
                await self.reactor.before_test()
                try:
                    await self._run_test(description, listener)
                finally:
                    await self.reactor.after_test()
        finally:
            await self.reactor.after_class()

    async def _run_test(
        self, description: TestDescription, listener: TestListener
    ) -> None:
        try:
            await self.reactor.run_test(description, listener)
        except ExamReactorError as exc:
            log.error("Test %s could not run: %s", description, exc, exc_info=exc)
            listener.test_finished(
                TestResult(
                    description=description,
                    status="error",
                    duration=0.0,
                    message=str(exc),
                )
            )


def _class_of(description: TestDescription) -> str:
    return description.class_name


@dataclass(frozen=True, kw_only=True)
class _Tee(TestListener):
    recorder: RecordingListener
    listener: TestListener | None

    def test_started(self, description: TestDescription) -> None:
        if self.listener is not None:
            self.listener.test_started(description)

    def test_finished(self, result: TestResult) -> None:
        self.recorder.test_finished(result)
        if self.listener is not None:
            self.listener.test_finished(result)
