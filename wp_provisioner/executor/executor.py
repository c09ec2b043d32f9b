# wp_provisioner/executor/executor.py
"""Step executor - runs the pipeline, skipping satisfied steps."""

import logging
from typing import List

from wp_provisioner.core.errors import CorruptState, RunInProgress, StepFailed
from wp_provisioner.core.events import NullEventEmitter
from wp_provisioner.core.events_model import StepEvent
from wp_provisioner.core.models import FailurePolicy, RunReport, StepRecord
from wp_provisioner.executor.context import RunContext
from wp_provisioner.executor.step import Step, validate_order

logger = logging.getLogger(__name__)

# Errors an operator must resolve by hand; never folded into StepFailed
OPERATOR_ERRORS = (CorruptState, RunInProgress)


class StepExecutor:
    """
    Runs steps in order.

    Flow per step:
    1. Evaluate the idempotency predicate; skip if it holds
    2. Apply the action
    3. Re-check the postcondition; unmet means failure
    4. On failure: halt (default) or warn and continue
    """

    def __init__(self, emitter=None):
        self._emitter = emitter or NullEventEmitter()

    def run(self, steps: List[Step], ctx: RunContext) -> RunReport:
        """
        Run the pipeline for ctx.target.

        Returns:
            RunReport with one record per step reached

        Raises:
            StepFailed: A halting step failed (carries the report)
            CorruptState, RunInProgress: Propagated unchanged
        """
        ordered = validate_order(steps)
        report = RunReport(domain=ctx.target.domain)

        logger.info(f"[executor] 🚀 {len(ordered)} steps for {ctx.target.domain}")

        for step in ordered:
            record = StepRecord(step_id=step.step_id, name=step.name)
            report.records.append(record)
            record.start()
            self._emit(StepEvent.step_started(step, ctx.target.domain))

            try:
                if not step.always_applied and step.check(ctx):
                    record.skip()
                    logger.info(f"[executor] {step.step_id}: already satisfied")
                    self._emit(StepEvent.step_skipped(step, ctx.target.domain))
                    continue

                if step.always_applied:
                    logger.debug(f"[executor] {step.step_id}: reapplied on every run")
                step.apply(ctx)

                postcondition = step.postcondition()
                if postcondition is not None and not postcondition(ctx):
                    raise StepFailed(step.step_id, "postcondition still unmet after apply")

            except OPERATOR_ERRORS as e:
                record.fail(str(e))
                self._emit(StepEvent.step_failed(step, ctx.target.domain, str(e)))
                raise

            except Exception as e:
                cause = e.cause if isinstance(e, StepFailed) else e

                if step.on_failure == FailurePolicy.WARN:
                    record.warn(str(cause))
                    logger.warning(f"[executor] ⚠️ {step.step_id} failed, continuing: {cause}")
                    self._emit(StepEvent.step_warned(step, ctx.target.domain, str(cause)))
                    continue

                record.fail(str(cause))
                logger.error(f"[executor] ❌ {step.step_id} failed: {cause}")
                self._emit(StepEvent.step_failed(step, ctx.target.domain, str(cause)))
                raise StepFailed(step.step_id, cause, report=report) from e

            record.applied()
            logger.info(f"[executor] ✅ {step.step_id} applied")
            self._emit(StepEvent.step_applied(step, ctx.target.domain))

        return report

    def _emit(self, event: StepEvent) -> None:
        self._emitter.emit([event])
