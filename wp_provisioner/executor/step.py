# wp_provisioner/executor/step.py
"""Step definition: an idempotency predicate plus an action."""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from wp_provisioner.core.models import FailurePolicy


@dataclass
class Step:
    """
    One idempotent unit of the provisioning pipeline.

    check:  idempotency predicate; None means the step is always applied
    verify: postcondition re-checked after apply; defaults to check. None
            with no check means the step has no verifiable postcondition.
    """
    step_id: str
    name: str
    order: int
    apply: Callable[["RunContext"], None]
    check: Optional[Callable[["RunContext"], bool]] = None
    verify: Optional[Callable[["RunContext"], bool]] = None
    depends_on: List[str] = field(default_factory=list)
    on_failure: FailurePolicy = FailurePolicy.HALT

    @property
    def always_applied(self) -> bool:
        return self.check is None

    def postcondition(self) -> Optional[Callable[["RunContext"], bool]]:
        return self.verify or self.check


def validate_order(steps: List[Step]) -> List[Step]:
    """
    Sort steps by order and make sure every dependency comes earlier.

    Raises:
        ValueError: On duplicate ids/orders or a dependency that is unknown
            or not strictly earlier
    """
    ordered = sorted(steps, key=lambda s: s.order)
    seen = set()
    orders = set()

    for step in ordered:
        if step.step_id in seen:
            raise ValueError(f"duplicate step id {step.step_id}")
        if step.order in orders:
            raise ValueError(f"duplicate step order {step.order} ({step.step_id})")

        for dep in step.depends_on:
            if dep not in seen:
                raise ValueError(
                    f"step {step.step_id} depends on {dep}, which does not run before it"
                )

        seen.add(step.step_id)
        orders.add(step.order)

    return ordered
