# wp_provisioner/adapters/host.py
"""Host filesystem operations (ownership, modes, atomic writes)."""

import grp
import logging
import os
import pwd
import shutil
import tempfile

logger = logging.getLogger(__name__)


class LocalHost:
    """Filesystem collaborator for the local machine."""

    # -------------------------
    # OWNERSHIP / MODES
    # -------------------------

    def chown(self, path: str, user: str, group: str) -> None:
        uid = pwd.getpwnam(user).pw_uid
        gid = grp.getgrnam(group).gr_gid
        os.chown(path, uid, gid, follow_symlinks=False)

    def chown_tree(self, root: str, user: str, group: str) -> None:
        self.chown(root, user, group)
        for dirpath, dirnames, filenames in os.walk(root):
            for name in dirnames + filenames:
                self.chown(os.path.join(dirpath, name), user, group)

    def chmod_tree(self, root: str, dir_mode: int, file_mode: int) -> None:
        os.chmod(root, dir_mode)
        for dirpath, dirnames, filenames in os.walk(root):
            for name in dirnames:
                path = os.path.join(dirpath, name)
                if not os.path.islink(path):
                    os.chmod(path, dir_mode)
            for name in filenames:
                path = os.path.join(dirpath, name)
                if not os.path.islink(path):
                    os.chmod(path, file_mode)

    def ensure_dir(self, path: str, mode: int, user: str, group: str) -> None:
        os.makedirs(path, exist_ok=True)
        self.chown(path, user, group)
        os.chmod(path, mode)

    # -------------------------
    # CONTENT
    # -------------------------

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def list_dir(self, path: str):
        if not os.path.isdir(path):
            return []
        return sorted(os.listdir(path))

    def read_text(self, path: str) -> str:
        with open(path, encoding="utf-8") as fh:
            return fh.read()

    def write_atomic(self, path: str, text: str, mode: int = 0o644) -> None:
        """Write via a temp file in the same directory and rename over path."""
        directory = os.path.dirname(path) or "."
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".wp-provision.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                os.fchmod(fh.fileno(), mode)
                fh.write(text)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def clear_dir(self, path: str) -> None:
        """Remove everything inside path, keeping path itself."""
        for name in os.listdir(path):
            child = os.path.join(path, name)
            if os.path.isdir(child) and not os.path.islink(child):
                shutil.rmtree(child)
            else:
                os.unlink(child)

    def copy_contents(self, source: str, dest: str) -> None:
        """Copy the contents of source into dest, preserving metadata (cp -a src/. dest/)."""
        os.makedirs(dest, exist_ok=True)
        shutil.copytree(source, dest, symlinks=True, dirs_exist_ok=True)
        logger.debug(f"[host] copied {source} into {dest}")
