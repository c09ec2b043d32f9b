# wp_provisioner/adapters/webserver.py
import logging
import os

from wp_provisioner.core.errors import CommandError

logger = logging.getLogger(__name__)


class ApacheControl:
    """Apache collaborator: site enabling and service control."""

    def __init__(self, runner, service: str, sites_enabled: str):
        self._runner = runner
        self._service = service
        self._sites_enabled = sites_enabled

    def is_site_enabled(self, site_config: str) -> bool:
        name = os.path.basename(site_config)
        return os.path.exists(os.path.join(self._sites_enabled, name))

    def enable_site(self, site_config: str) -> None:
        name = os.path.basename(site_config)
        self._runner.run(["a2ensite", name])
        logger.info(f"[apache] enabled site {name}")

    def reload(self) -> None:
        self._runner.run(["systemctl", "reload", self._service])

    def restart(self) -> None:
        self._runner.run(["systemctl", "restart", self._service])
        logger.info(f"[apache] restarted {self._service}")

    def reload_or_restart(self) -> None:
        try:
            self.reload()
            logger.info(f"[apache] reloaded {self._service}")
        except CommandError as e:
            logger.warning(f"[apache] reload failed ({e}), restarting")
            self.restart()
