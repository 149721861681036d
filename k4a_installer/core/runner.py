"""Step runner — executes installation steps in order and folds their outcomes."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from k4a_installer.core.diagnostics import DiagnosticAccumulator
from k4a_installer.core.models import RunResult, StepOutcome
from k4a_installer.core.report import Reporter
from k4a_installer.installers.base import Step, StepContext

logger = logging.getLogger(__name__)


class StepRunner:
    """Runs steps sequentially: fatal outcomes stop the run, soft ones accumulate."""

    def __init__(
        self,
        context: StepContext,
        reporter: Reporter,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.context = context
        self.reporter = reporter
        self.clock = clock or datetime.now

    def run(self, steps: list[Step]) -> RunResult:
        accumulator = DiagnosticAccumulator()
        printer = self.context.printer
        total = len(steps)

        for number, step in enumerate(steps, 1):
            printer.step(number, total, step.title)
            try:
                outcome = step.body(self.context)
            except Exception as e:
                logger.exception("Step %d (%s) raised", number, step.title)
                outcome = StepOutcome.failed(step.category, f"Unexpected error: {e}")

            if outcome.fatal is not None:
                fatal = outcome.fatal
                printer.error(fatal.message)
                self.reporter.print_remediation(fatal.category)
                logger.info(
                    "Aborting at step %d/%d (%s), exit code %d",
                    number, total, fatal.category.value, fatal.exit_code,
                )
                return RunResult(
                    exit_code=fatal.exit_code,
                    total_steps=total,
                    steps_completed=number - 1,
                    tags=list(accumulator),
                    failed_step=number,
                    fatal_category=fatal.category,
                )

            for probe in outcome.soft_failures:
                logger.debug("Soft failure in step %d: %s", number, probe.tag.name)
                accumulator.append(probe.tag)

        self.reporter.render(accumulator, completed_at=self.clock())
        return RunResult(
            exit_code=0,
            total_steps=total,
            steps_completed=total,
            tags=list(accumulator),
        )
