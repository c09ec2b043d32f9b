# wp_provisioner/adapters/packages.py
import logging
from typing import Iterable, List

logger = logging.getLogger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


class AptPackageManager:
    """dpkg/apt-get collaborator."""

    def __init__(self, runner):
        self._runner = runner

    def is_installed(self, package: str) -> bool:
        result = self._runner.run(
            ["dpkg-query", "-W", "-f=${Status}", package],
            check=False,
        )
        return result.returncode == 0 and result.stdout.strip() == "install ok installed"

    def missing(self, packages: Iterable[str]) -> List[str]:
        return [p for p in packages if not self.is_installed(p)]

    def install(self, packages: List[str], upgrade: bool = True) -> None:
        logger.info(f"[apt] installing {len(packages)} package(s)")

        self._runner.run(["apt-get", "update", "-y"], env=APT_ENV)
        if upgrade:
            self._runner.run(["apt-get", "upgrade", "-y"], env=APT_ENV)
        self._runner.run(["apt-get", "install", "-y", *packages], env=APT_ENV)
