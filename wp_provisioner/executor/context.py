# wp_provisioner/executor/context.py
from dataclasses import dataclass
from typing import Callable, Optional

from wp_provisioner.core.models import Target


@dataclass
class RunContext:
    """Everything a step needs: the target, settings and collaborators."""

    target: Target
    settings: object
    ledger: object
    packages: object
    apache: object
    database: object
    archive: object
    certbot: object
    salts: object
    host: object
    password_policy: object

    # Destructive web-root clear
    force: bool = False
    confirm: Optional[Callable[[str], bool]] = None

    # Set when the web server must pick up changes before the run ends
    webserver_dirty: bool = False
