"""Core domain models (provisioning target and run bookkeeping)."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


class LayoutMode(Enum):
    """Where the site lives on the web server."""

    VHOST = "vhost"      # /var/www/<domain>/public_html + dedicated vhost
    DEFAULT = "default"  # /var/www/html + stock 000-default site


class StepStatus(Enum):
    """Step state machine."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    APPLIED = "APPLIED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"
    WARNED = "WARNED"


class FailurePolicy(Enum):
    """What a step failure does to the rest of the pipeline."""

    HALT = "halt"
    WARN = "warn"


# ============================================
# TARGET
# ============================================

@dataclass(frozen=True)
class Target:
    """The single domain being provisioned and its derived facts."""

    domain: str
    layout: LayoutMode
    web_root: str
    site_config: str
    db_name: str
    db_user: str
    cert_email: str
    ledger_path: str

    # Generated once, persisted in the ledger
    db_password: Optional[str] = field(default=None, repr=False)

    @property
    def site_url(self) -> str:
        return f"https://{self.domain}"

    @property
    def install_url(self) -> str:
        return f"{self.site_url}/wp-admin/install.php"

    @property
    def aliases(self) -> List[str]:
        return [self.domain, f"www.{self.domain}"]

    def with_password(self, password: str) -> "Target":
        """Return a copy carrying the given database password."""
        return replace(self, db_password=password)


# ============================================
# RUN BOOKKEEPING
# ============================================

@dataclass
class StepRecord:
    """Outcome of one step within a run, with state transitions."""

    step_id: str
    name: str
    status: StepStatus = StepStatus.PENDING
    message: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    # -------------------------
    # STATE TRANSITIONS
    # -------------------------

    def start(self) -> None:
        """Transition from PENDING to RUNNING."""
        if self.status != StepStatus.PENDING:
            raise ValueError(f"Cannot start from {self.status.value} state")

        self.status = StepStatus.RUNNING
        self.started_at = datetime.now(timezone.utc)

    def skip(self, message: str = "already satisfied") -> None:
        """Transition from RUNNING to SKIPPED."""
        self._finish(StepStatus.SKIPPED, message)

    def applied(self, message: Optional[str] = None) -> None:
        """Transition from RUNNING to APPLIED."""
        self._finish(StepStatus.APPLIED, message)

    def fail(self, message: str) -> None:
        """Transition from RUNNING to FAILED."""
        self._finish(StepStatus.FAILED, message)

    def warn(self, message: str) -> None:
        """Transition from RUNNING to WARNED (non-fatal failure)."""
        self._finish(StepStatus.WARNED, message)

    def _finish(self, status: StepStatus, message: Optional[str]) -> None:
        if self.status != StepStatus.RUNNING:
            raise ValueError(
                f"Cannot move to {status.value} from {self.status.value} state"
            )

        self.status = status
        self.message = message
        self.finished_at = datetime.now(timezone.utc)


@dataclass
class RunReport:
    """Summary of a pipeline run."""

    domain: str
    records: List[StepRecord] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not any(r.status == StepStatus.FAILED for r in self.records)

    def applied_steps(self) -> List[str]:
        return [r.step_id for r in self.records if r.status == StepStatus.APPLIED]

    def skipped_steps(self) -> List[str]:
        return [r.step_id for r in self.records if r.status == StepStatus.SKIPPED]

    def warned_steps(self) -> List[str]:
        return [r.step_id for r in self.records if r.status == StepStatus.WARNED]

    def record_for(self, step_id: str) -> Optional[StepRecord]:
        for record in self.records:
            if record.step_id == step_id:
                return record
        return None
