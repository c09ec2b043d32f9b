# wp_provisioner/pipeline/database_steps.py
"""Database steps: dedicated database/user and the persisted site URL."""

import logging

from wp_provisioner.core.errors import CorruptState
from wp_provisioner.credentials.generator import generate_password

logger = logging.getLogger(__name__)


# ============================================
# 4. DATABASE + USER
# ============================================

def database_provisioned(ctx) -> bool:
    """Ledger present and MySQL agrees: database and user both exist."""
    target = ctx.target
    host = ctx.settings.db_host

    return (
        ctx.ledger.exists(target.domain)
        and ctx.database.database_exists(target.db_name)
        and ctx.database.user_exists(target.db_user, host)
    )


def create_database(ctx) -> None:
    """
    Create the database and a user scoped to it, reconciling with the ledger.

    The server is the source of truth for what exists; the ledger is the
    only source of the password. A user without a ledger means the
    password is unknowable, which needs an operator.
    """
    target = ctx.target
    host = ctx.settings.db_host
    db = ctx.database

    stored = ctx.ledger.load(target.domain)
    user_exists = db.user_exists(target.db_user, host)

    if stored is None:
        if user_exists:
            raise CorruptState(
                f"MySQL user {target.db_user}@{host} exists but {target.ledger_path} "
                "is missing, so its password is unknown; restore the ledger or "
                "drop the user, then re-run"
            )
        target = target.with_password(generate_password(ctx.password_policy))
        logger.info(f"[database] generated password for {target.db_user}")
    else:
        target = target.with_password(stored.db_password)
        logger.info(f"[database] reusing password from {target.ledger_path}")

    db.create_database(target.db_name, ctx.settings.db_charset, ctx.settings.db_collation)
    if not user_exists:
        db.create_user(target.db_user, host, target.db_password)
    db.grant_database(target.db_name, target.db_user, host)

    if stored is None:
        ctx.ledger.save(target)

    ctx.target = target


# ============================================
# 8. SITE URL (best effort)
# ============================================

def site_url_current(ctx) -> bool:
    urls = ctx.database.site_urls(ctx.target.db_name)
    if urls is None:
        # WordPress has not been installed interactively yet
        return True
    return all(value == ctx.target.site_url for value in urls.values())


def update_site_url(ctx) -> None:
    ctx.database.update_site_urls(ctx.target.db_name, ctx.target.site_url)
