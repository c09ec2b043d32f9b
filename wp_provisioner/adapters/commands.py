# wp_provisioner/adapters/commands.py
"""Runs external commands, raising CommandError on failure."""

import logging
import os
import subprocess
from typing import Dict, List, Optional

from wp_provisioner.core.errors import CommandError

logger = logging.getLogger(__name__)


class CommandRunner:
    """Executes argv lists (never through a shell)."""

    def __init__(self, timeout: int = 1800):
        self.timeout = timeout

    def run(
        self,
        argv: List[str],
        *,
        input: Optional[str] = None,
        check: bool = True,
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> subprocess.CompletedProcess:
        """
        Run a command and capture its output.

        Args:
            argv: Program and arguments
            input: Text fed to stdin (used for SQL so secrets stay off argv)
            check: Raise CommandError on a non-zero exit
            env: Extra environment variables
            timeout: Seconds before the command is killed

        Returns:
            The completed process (stdout/stderr as text)
        """
        logger.debug(f"[cmd] {' '.join(argv)}")

        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)

        try:
            result = subprocess.run(
                argv,
                input=input,
                capture_output=True,
                text=True,
                env=full_env,
                timeout=timeout or self.timeout,
            )
        except FileNotFoundError:
            raise CommandError(argv, 127, f"{argv[0]}: command not found")
        except subprocess.TimeoutExpired:
            raise CommandError(argv, -1, f"timed out after {timeout or self.timeout}s")

        if check and result.returncode != 0:
            raise CommandError(argv, result.returncode, result.stderr or result.stdout or "")

        return result
