# wp_provisioner/credentials/salts.py
"""Fetches a fresh block of WordPress salt definitions."""

import logging
import re

from wp_provisioner.core.errors import ProvisioningError, SaltFetchError

logger = logging.getLogger(__name__)


SALT_NAMES = (
    "AUTH_KEY",
    "SECURE_AUTH_KEY",
    "LOGGED_IN_KEY",
    "NONCE_KEY",
    "AUTH_SALT",
    "SECURE_AUTH_SALT",
    "LOGGED_IN_SALT",
    "NONCE_SALT",
)

_DEFINE = re.compile(r"""^\s*define\(\s*'(?P<name>[A-Z_]+)'\s*,\s*'.*'\s*\);\s*$""")


class SaltClient:
    """Client for the upstream secret-key generator."""

    def __init__(self, http, url: str):
        self._http = http
        self._url = url

    def fetch_salt_block(self) -> str:
        """
        Fetch and validate a salt block.

        Returns:
            The eight define() lines, newline-terminated

        Raises:
            SaltFetchError: If the service is unreachable or the answer is
                not a complete salt block. Nothing must be written then.
        """
        try:
            body = self._http.get_text(self._url)
        except ProvisioningError as e:
            raise SaltFetchError(f"cannot fetch salts from {self._url}: {e}") from e

        block = validate_salt_block(body)
        logger.info("[salts] ✅ fetched fresh salt block")
        return block


def validate_salt_block(body: str) -> str:
    """Return the normalized salt block or raise SaltFetchError."""
    lines = [line.rstrip() for line in (body or "").strip().splitlines() if line.strip()]
    if not lines:
        raise SaltFetchError("salt service returned an empty body")

    names = []
    for line in lines:
        match = _DEFINE.match(line)
        if not match:
            raise SaltFetchError(f"unexpected line in salt block: {line[:40]!r}")
        names.append(match.group("name"))

    if tuple(names) != SALT_NAMES:
        raise SaltFetchError(f"salt block defines {names}, expected {list(SALT_NAMES)}")

    return "\n".join(lines) + "\n"
