# wp_provisioner/infrastructure/file/ledger.py
"""Run ledger persisted as a flat KEY=VALUE file per domain."""

import logging
import os
import tempfile
from typing import Dict, Optional

from pydantic import ValidationError

from wp_provisioner.core.errors import CorruptState
from wp_provisioner.core.factory import TargetFactory
from wp_provisioner.core.models import LayoutMode, Target
from wp_provisioner.core.repository import LedgerRepository
from wp_provisioner.core.schemas import LedgerRecord

logger = logging.getLogger(__name__)

LEDGER_MODE = 0o600


class FileLedgerRepository(LedgerRepository):
    """
    Ledger stored at <ledger_dir>/.<domain>_db_creds.

    The file is only ever replaced whole (temp file + rename) so an
    interrupted write leaves either the old ledger or none at all.
    """

    def __init__(self, factory: TargetFactory):
        self._factory = factory

    def exists(self, domain: str) -> bool:
        return os.path.isfile(self._factory.create(domain).ledger_path)

    def load(self, domain: str) -> Optional[Target]:
        derived = self._factory.create(domain)
        path = derived.ledger_path

        if not os.path.exists(path):
            return None

        if not os.path.isfile(path):
            raise CorruptState(f"ledger path {path} is not a regular file")

        try:
            with open(path, encoding="utf-8") as fh:
                text = fh.read()
        except (OSError, UnicodeDecodeError) as e:
            raise CorruptState(f"cannot read ledger {path}: {e}") from e

        record = self._parse(path, text)
        self._check_matches(path, record, derived)
        layout = self._layout_for(path, record, derived)

        if layout != derived.layout:
            logger.info(f"[ledger] {derived.domain} was installed with layout {layout.value}")
        logger.debug(f"[ledger] loaded {path}")

        return self._factory.create(
            derived.domain,
            layout=layout,
            cert_email=record.cert_email or None,
            db_password=record.db_pass,
        )

    def save(self, target: Target) -> None:
        if not target.db_password:
            raise ValueError("refusing to persist a ledger without a password")

        record = LedgerRecord.from_target(target)
        path = target.ledger_path
        directory = os.path.dirname(path) or "."
        os.makedirs(directory, mode=0o700, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            dir=directory,
            prefix=os.path.basename(path) + ".",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                os.fchmod(fh.fileno(), LEDGER_MODE)
                fh.write(record.to_lines())
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.info(f"[ledger] saved {path} (owner-only)")

    # -------------------------
    # PARSING
    # -------------------------

    @staticmethod
    def _parse(path: str, text: str) -> LedgerRecord:
        values: Dict[str, str] = {}

        for lineno, raw in enumerate(text.splitlines(), start=1):
            line = raw.rstrip("\r")
            if not line.strip() or line.lstrip().startswith("#"):
                continue

            if "=" not in line:
                raise CorruptState(f"{path}:{lineno}: expected KEY=VALUE")

            key, value = line.split("=", 1)
            key = key.strip()
            if not key:
                raise CorruptState(f"{path}:{lineno}: empty key")
            if key in values:
                raise CorruptState(f"{path}:{lineno}: duplicate key {key}")

            values[key] = value

        try:
            return LedgerRecord.model_validate(values)
        except ValidationError as e:
            fields = ", ".join(
                ".".join(str(part) for part in err["loc"]) or "?" for err in e.errors()
            )
            raise CorruptState(f"{path}: malformed ledger ({fields})") from None

    def _layout_for(self, path: str, record: LedgerRecord, derived: Target) -> LayoutMode:
        """The recorded WEB_ROOT decides the layout, whatever this run is configured for."""
        candidates = [derived.layout] + [m for m in LayoutMode if m != derived.layout]
        for layout in candidates:
            if record.web_root == self._factory.web_root(derived.domain, layout):
                return layout

        raise CorruptState(
            f"{path}: WEB_ROOT={record.web_root!r} matches no layout for {derived.domain}"
        )

    @staticmethod
    def _check_matches(path: str, record: LedgerRecord, derived: Target) -> None:
        expected = {
            "DOMAIN": (record.domain, derived.domain),
            "DB_NAME": (record.db_name, derived.db_name),
            "DB_USER": (record.db_user, derived.db_user),
        }
        for key, (found, wanted) in expected.items():
            if found != wanted:
                raise CorruptState(
                    f"{path}: {key}={found!r} but this run derives {wanted!r}"
                )
