# wp_provisioner/adapters/certbot.py
import logging
import os
from typing import List

logger = logging.getLogger(__name__)


class CertbotClient:
    """Certificate authority client (certbot with the apache installer)."""

    def __init__(self, runner, live_dir: str):
        self._runner = runner
        self._live_dir = live_dir

    def has_certificate(self, domain: str) -> bool:
        return os.path.isfile(os.path.join(self._live_dir, domain, "fullchain.pem"))

    def issue(self, domains: List[str], email: str) -> None:
        argv = ["certbot", "--apache", "-n", "--agree-tos", "--email", email]
        for domain in domains:
            argv += ["-d", domain]

        self._runner.run(argv)
        logger.info(f"[certbot] ✅ certificate issued for {', '.join(domains)}")
