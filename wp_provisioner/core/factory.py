# wp_provisioner/core/factory.py
import hashlib
import os
from typing import Optional

from wp_provisioner.core.models import LayoutMode, Target
from wp_provisioner.core.validation import clean_name, normalize_domain

# MySQL caps user names at 32 characters and database names at 64
MAX_DB_NAME = 64
MAX_DB_USER = 32


class TargetFactory:
    """Derives every deterministic fact about a domain."""

    def __init__(self, settings):
        self._settings = settings

    def create(
        self,
        domain: str,
        *,
        layout: Optional[LayoutMode] = None,
        cert_email: Optional[str] = None,
        db_password: Optional[str] = None,
    ) -> Target:
        domain = normalize_domain(domain)
        layout = layout or self._settings.layout

        db_name, db_user = self.database_names(domain)

        return Target(
            domain=domain,
            layout=layout,
            web_root=self.web_root(domain, layout),
            site_config=self.site_config(domain, layout),
            db_name=db_name,
            db_user=db_user,
            cert_email=cert_email or self._settings.cert_email or f"admin@{domain}",
            ledger_path=self.ledger_path(domain),
            db_password=db_password,
        )

    @staticmethod
    def database_names(domain: str):
        """
        Return (db_name, db_user) for a normalized domain.

        Plain domains map readably (example.com -> wp_example_com). Hyphens
        collapse onto the same underscore as dots, and long names must be
        cut to MySQL's limits, so both cases get a digest of the full
        domain appended to stay unique per domain.
        """
        stem = f"wp_{clean_name(domain)}"
        suffix = "_user"

        needs_digest = "-" in domain or len(stem) + len(suffix) > MAX_DB_USER
        if not needs_digest:
            return stem, f"{stem}{suffix}"

        digest = "_" + hashlib.sha256(domain.encode("utf-8")).hexdigest()[:8]
        db_name = stem[:MAX_DB_NAME - len(digest)] + digest
        db_user = stem[:MAX_DB_USER - len(digest) - len(suffix)] + digest + suffix
        return db_name, db_user

    def web_root(self, domain: str, layout: LayoutMode) -> str:
        if layout == LayoutMode.DEFAULT:
            return self._settings.default_web_root
        return os.path.join(self._settings.www_root, domain, "public_html")

    def site_config(self, domain: str, layout: LayoutMode) -> str:
        if layout == LayoutMode.DEFAULT:
            name = self._settings.default_site_name
        else:
            name = domain
        return os.path.join(self._settings.apache_sites_available, f"{name}.conf")

    def ledger_path(self, domain: str) -> str:
        return os.path.join(self._settings.ledger_dir, f".{domain}_db_creds")
