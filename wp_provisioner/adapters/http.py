# wp_provisioner/adapters/http.py
"""HTTPS GET with timeouts, mapping failures onto the error taxonomy."""

import logging

import requests

from wp_provisioner.core.errors import ProvisioningError, TransientError
from wp_provisioner.executor.retry import RetryPolicy, call_with_retries

logger = logging.getLogger(__name__)

TRANSIENT_STATUS = {429, 500, 502, 503, 504}


class HttpClient:
    """Thin wrapper over a requests session."""

    def __init__(self, timeout: int = 60, retry_policy: RetryPolicy = None, session=None):
        """
        Args:
            timeout: Connect/read timeout per attempt in seconds
            retry_policy: Attempts and backoff for transient failures
            session: Optional requests.Session (tests inject one)
        """
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self._session = session or requests.Session()

    def get_text(self, url: str) -> str:
        """GET a small text body, retrying transient failures."""
        response = call_with_retries(
            lambda: self._get(url, stream=False),
            self.retry_policy,
            what=f"GET {url}",
        )
        return response.text

    def download(self, url: str, dest: str, chunk_size: int = 1 << 20) -> int:
        """
        Stream url into dest, retrying transient failures.

        Returns:
            Number of bytes written
        """
        def attempt() -> int:
            response = self._get(url, stream=True)
            written = 0
            try:
                with open(dest, "wb") as fh:
                    for chunk in response.iter_content(chunk_size=chunk_size):
                        if chunk:
                            fh.write(chunk)
                            written += len(chunk)
            except requests.exceptions.RequestException as e:
                raise TransientError(f"download of {url} interrupted: {e}") from e
            finally:
                response.close()
            return written

        written = call_with_retries(attempt, self.retry_policy, what=f"download {url}")
        logger.info(f"[http] ✅ downloaded {url} ({written} bytes)")
        return written

    def _get(self, url: str, stream: bool):
        try:
            response = self._session.get(url, timeout=self.timeout, stream=stream)
        except requests.exceptions.Timeout:
            raise TransientError(f"timeout after {self.timeout}s fetching {url}")
        except requests.exceptions.ConnectionError as e:
            raise TransientError(f"cannot connect to {url}: {e}")
        except requests.exceptions.RequestException as e:
            raise ProvisioningError(f"request to {url} failed: {e}")

        if response.status_code in TRANSIENT_STATUS:
            response.close()
            raise TransientError(f"{url} answered HTTP {response.status_code}")

        if response.status_code != 200:
            response.close()
            raise ProvisioningError(f"{url} answered HTTP {response.status_code}")

        return response
