"""Provisioning service - install, rotate, show."""

import logging
import os
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from wp_provisioner.core.errors import CorruptState, UsageError
from wp_provisioner.core.models import RunReport, Target
from wp_provisioner.credentials.generator import generate_password
from wp_provisioner.executor.context import RunContext
from wp_provisioner.executor.step import Step
from wp_provisioner.infrastructure.lock import run_lock
from wp_provisioner.pipeline.application_steps import CONFIG_NAME, rewrite_credentials

logger = logging.getLogger(__name__)


@dataclass
class ProvisionResult:
    """Outcome of an install run."""
    target: Target
    report: RunReport


class ProvisioningService:
    """
    Provisions one domain per call.

    Flow:
    1. Derive the target and take the per-domain lock
    2. Load the ledger (a corrupt ledger stops everything up front)
    3. Run the pipeline; every step is idempotent, so a failed run is
       recovered by running again
    """

    def __init__(
        self,
        *,
        settings,
        factory,
        ledger,
        executor,
        packages,
        apache,
        database,
        archive,
        certbot,
        salts,
        host,
        password_policy,
        pipeline: Callable[[bool], List[Step]],
    ):
        self._settings = settings
        self._factory = factory
        self._ledger = ledger
        self._executor = executor
        self._packages = packages
        self._apache = apache
        self._database = database
        self._archive = archive
        self._certbot = certbot
        self._salts = salts
        self._host = host
        self._password_policy = password_policy
        self._pipeline = pipeline

    # ============================================
    # INSTALL
    # ============================================

    def install(
        self,
        domain: str,
        *,
        force: bool = False,
        confirm: Optional[Callable[[str], bool]] = None,
    ) -> ProvisionResult:
        """Run the full pipeline for a domain."""
        target = self._factory.create(domain)

        with run_lock(self._settings.lock_dir, target.domain):
            stored = self._ledger.load(target.domain)
            if stored is not None:
                logger.info(f"[service] resuming {target.domain} from {target.ledger_path}")
                target = stored
                if self._settings.cert_email and self._settings.cert_email != stored.cert_email:
                    # An explicit --email beats the one recorded at first install
                    target = replace(target, cert_email=self._settings.cert_email)
            else:
                logger.info(f"[service] starting fresh install for {target.domain}")

            ctx = RunContext(
                target=target,
                settings=self._settings,
                ledger=self._ledger,
                packages=self._packages,
                apache=self._apache,
                database=self._database,
                archive=self._archive,
                certbot=self._certbot,
                salts=self._salts,
                host=self._host,
                password_policy=self._password_policy,
                force=force,
                confirm=confirm,
            )

            steps = self._pipeline(self._settings.issue_certificate)
            report = self._executor.run(steps, ctx)

        return ProvisionResult(target=ctx.target, report=report)

    # ============================================
    # ROTATE
    # ============================================

    def rotate_password(self, domain: str) -> Target:
        """
        Replace the database password: ledger first, then MySQL, then
        wp-config.php. A crash part-way leaves the ledger holding the
        newest password, and re-running the rotation converges.
        """
        target = self._factory.create(domain)
        host = self._settings.db_host

        with run_lock(self._settings.lock_dir, target.domain):
            stored = self._ledger.load(target.domain)
            if stored is None:
                raise UsageError(f"no ledger for {target.domain}; run install first")

            if not self._database.user_exists(stored.db_user, host):
                raise CorruptState(
                    f"ledger names {stored.db_user}@{host} but MySQL has no such user"
                )

            rotated = stored.with_password(generate_password(self._password_policy))
            self._ledger.save(rotated)
            self._database.set_password(rotated.db_user, host, rotated.db_password)
            self._rewrite_config_password(rotated)

        logger.info(f"[service] ✅ rotated database password for {rotated.domain}")
        return rotated

    def _rewrite_config_password(self, target: Target) -> None:
        path = os.path.join(target.web_root, CONFIG_NAME)
        if not self._host.exists(path):
            return

        rewrite_credentials(
            self._host, self._settings, path, {"DB_PASSWORD": target.db_password}
        )
        logger.info(f"[service] updated DB_PASSWORD in {path}")

    # ============================================
    # SHOW
    # ============================================

    def show(self, domain: str) -> Optional[Target]:
        """Ledger facts for a domain, or None if never provisioned."""
        return self._ledger.load(domain)
