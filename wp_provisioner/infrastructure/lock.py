# wp_provisioner/infrastructure/lock.py
"""Per-domain run lock (flock on a well-known path)."""

import fcntl
import logging
import os
from contextlib import contextmanager

from wp_provisioner.core.errors import RunInProgress

logger = logging.getLogger(__name__)


def lock_path(lock_dir: str, domain: str) -> str:
    return os.path.join(lock_dir, f"wp-provision-{domain}.lock")


def try_lock_exclusively(fileno: int) -> bool:
    try:
        fcntl.flock(fileno, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    return True


@contextmanager
def run_lock(lock_dir: str, domain: str):
    """Hold an exclusive lock for the domain; fail fast if another run has it."""
    path = lock_path(lock_dir, domain)
    os.makedirs(lock_dir, exist_ok=True)

    fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o600)
    try:
        if not try_lock_exclusively(fd):
            raise RunInProgress(
                f"another run for {domain} holds {path}"
            )

        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode())
        logger.debug(f"[lock] acquired {path}")

        try:
            yield path
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            logger.debug(f"[lock] released {path}")
    finally:
        os.close(fd)
