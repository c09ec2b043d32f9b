# wp_provisioner/container.py

"""Dependency injection container - wires all collaborators together."""

from wp_provisioner.adapters.archive import WordPressArchive
from wp_provisioner.adapters.certbot import CertbotClient
from wp_provisioner.adapters.commands import CommandRunner
from wp_provisioner.adapters.database import MySQLAdmin
from wp_provisioner.adapters.host import LocalHost
from wp_provisioner.adapters.http import HttpClient
from wp_provisioner.adapters.packages import AptPackageManager
from wp_provisioner.adapters.webserver import ApacheControl
from wp_provisioner.core.events import ConsoleEventEmitter, MultiEventEmitter
from wp_provisioner.core.factory import TargetFactory
from wp_provisioner.credentials.generator import PasswordPolicy
from wp_provisioner.credentials.salts import SaltClient
from wp_provisioner.executor.executor import StepExecutor
from wp_provisioner.executor.retry import RetryPolicy
from wp_provisioner.infrastructure.file.ledger import FileLedgerRepository
from wp_provisioner.pipeline.wordpress import build_wordpress_pipeline
from wp_provisioner.service import ProvisioningService


def build_service(settings, emitter=None) -> ProvisioningService:
    """Build the production service for the given settings."""

    # ============================================
    # POLICIES
    # ============================================

    password_policy = PasswordPolicy.build(
        length=settings.password_length,
        alphabet=settings.password_alphabet,
    )
    retry_policy = RetryPolicy(
        attempts=settings.retry_attempts,
        backoff_seconds=settings.retry_backoff_seconds,
    )

    # ============================================
    # COLLABORATORS
    # ============================================

    runner = CommandRunner(timeout=settings.command_timeout)
    http = HttpClient(timeout=settings.http_timeout, retry_policy=retry_policy)
    factory = TargetFactory(settings)

    # ============================================
    # EVENTS
    # ============================================

    emitters = emitter or MultiEventEmitter([
        ConsoleEventEmitter()
    ])

    # ============================================
    # SERVICE
    # ============================================

    return ProvisioningService(
        settings=settings,
        factory=factory,
        ledger=FileLedgerRepository(factory),
        executor=StepExecutor(emitters),
        packages=AptPackageManager(runner),
        apache=ApacheControl(runner, settings.apache_service, settings.apache_sites_enabled),
        database=MySQLAdmin(runner, settings.mysql_binary),
        archive=WordPressArchive(http, settings.wordpress_url, settings.scratch_dir),
        certbot=CertbotClient(runner, settings.letsencrypt_live_dir),
        salts=SaltClient(http, settings.salt_url),
        host=LocalHost(),
        password_policy=password_policy,
        pipeline=build_wordpress_pipeline,
    )
