# wp_provisioner/adapters/archive.py
"""Fetches and unpacks the WordPress release archive."""

import logging
import os
import shutil
import tempfile
import zipfile
from contextlib import contextmanager

from wp_provisioner.core.errors import ProvisioningError

logger = logging.getLogger(__name__)


class WordPressArchive:
    """Download source for the application code."""

    def __init__(self, http, url: str, scratch_dir: str):
        self._http = http
        self._url = url
        self._scratch_dir = scratch_dir

    @contextmanager
    def unpacked(self):
        """
        Download and extract the archive into a private scratch directory.

        Yields:
            Path of the extracted "wordpress" directory; the scratch
            directory is removed on exit.
        """
        os.makedirs(self._scratch_dir, exist_ok=True)
        workdir = tempfile.mkdtemp(prefix="wp-provision-", dir=self._scratch_dir)
        try:
            archive_path = os.path.join(workdir, "wordpress_latest.zip")
            self._http.download(self._url, archive_path)

            extract_dir = os.path.join(workdir, "extract")
            extract_zip(archive_path, extract_dir)

            source = os.path.join(extract_dir, "wordpress")
            if not os.path.isdir(source):
                raise ProvisioningError(f"{self._url} has no top-level wordpress/ directory")

            yield source
        finally:
            shutil.rmtree(workdir, ignore_errors=True)


def extract_zip(archive_path: str, dest: str) -> None:
    """Extract a zip, refusing members that would land outside dest."""
    os.makedirs(dest, exist_ok=True)
    root = os.path.realpath(dest)

    try:
        with zipfile.ZipFile(archive_path) as zf:
            for member in zf.namelist():
                target = os.path.realpath(os.path.join(root, member))
                if target != root and not target.startswith(root + os.sep):
                    raise ProvisioningError(f"archive member escapes extract dir: {member}")
            zf.extractall(root)
    except zipfile.BadZipFile as e:
        raise ProvisioningError(f"corrupt archive {archive_path}: {e}") from e

    logger.debug(f"[archive] extracted {archive_path} into {dest}")
