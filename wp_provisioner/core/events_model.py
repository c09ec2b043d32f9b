"""Event models for the provisioning pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass
class StepEvent:
    """Base step event."""

    event_type: str
    step_id: str
    step_name: str
    domain: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def step_started(step, domain: str):
        """Step started event."""
        return StepEvent(
            event_type="step.started",
            step_id=step.step_id,
            step_name=step.name,
            domain=domain,
            metadata={"order": step.order},
        )

    @staticmethod
    def step_skipped(step, domain: str):
        """Step skipped event (postcondition already held)."""
        return StepEvent(
            event_type="step.skipped",
            step_id=step.step_id,
            step_name=step.name,
            domain=domain,
            message="already satisfied",
        )

    @staticmethod
    def step_applied(step, domain: str):
        """Step applied event."""
        return StepEvent(
            event_type="step.applied",
            step_id=step.step_id,
            step_name=step.name,
            domain=domain,
        )

    @staticmethod
    def step_failed(step, domain: str, error: str):
        """Step failed event (halts the pipeline)."""
        return StepEvent(
            event_type="step.failed",
            step_id=step.step_id,
            step_name=step.name,
            domain=domain,
            message=error,
        )

    @staticmethod
    def step_warned(step, domain: str, error: str):
        """Step failed under a non-fatal policy."""
        return StepEvent(
            event_type="step.warned",
            step_id=step.step_id,
            step_name=step.name,
            domain=domain,
            message=error,
        )
