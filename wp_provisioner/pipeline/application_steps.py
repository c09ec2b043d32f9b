# wp_provisioner/pipeline/application_steps.py
"""WordPress steps: unpack, wp-config.php, content permissions."""

import logging
import os
from typing import Dict

from wp_provisioner.core.errors import ProvisioningError, TemplateError
from wp_provisioner.templating.wp_config import parse_define, render, substitute_define

logger = logging.getLogger(__name__)

CONFIG_NAME = "wp-config.php"
SAMPLE_NAME = "wp-config-sample.php"
CONFIG_MODE = 0o640

# What may be wiped from a web root without asking
DISPOSABLE_ENTRIES = {"index.html"}


def config_path(ctx) -> str:
    return os.path.join(ctx.target.web_root, CONFIG_NAME)


# ============================================
# 5. FETCH + UNPACK
# ============================================

def config_present(ctx) -> bool:
    return ctx.host.exists(config_path(ctx))


def wordpress_unpacked(ctx) -> bool:
    root = ctx.target.web_root
    return (
        ctx.host.exists(os.path.join(root, "wp-settings.php"))
        and ctx.host.exists(os.path.join(root, SAMPLE_NAME))
    )


def _clear_allowed(ctx, entries) -> bool:
    if not entries:
        return True
    if SAMPLE_NAME in entries or set(entries) <= DISPOSABLE_ENTRIES:
        # Stock placeholder page or an earlier, unconfigured unpack
        return True
    if ctx.force:
        return True
    if ctx.confirm is not None:
        shown = ", ".join(entries[:5]) + (" ..." if len(entries) > 5 else "")
        return ctx.confirm(
            f"{ctx.target.web_root} is not empty ({shown}). Delete its contents?"
        )
    return False


def fetch_wordpress(ctx) -> None:
    root = ctx.target.web_root
    settings = ctx.settings

    entries = ctx.host.list_dir(root)
    if not _clear_allowed(ctx, entries):
        raise ProvisioningError(
            f"{root} holds {len(entries)} unrecognized entries; "
            "re-run with --force to replace them with WordPress"
        )

    with ctx.archive.unpacked() as source:
        ctx.host.clear_dir(root)
        ctx.host.copy_contents(source, root)

    ctx.host.chown_tree(root, settings.service_user, settings.service_group)
    ctx.host.chmod_tree(root, 0o755, 0o644)
    logger.info(f"[wordpress] unpacked into {root}")


# ============================================
# 6. WP-CONFIG.PHP
# ============================================

def _ledger_credentials(ctx) -> Dict[str, str]:
    target = ctx.target
    stored = ctx.ledger.load(target.domain)
    if stored is None or not stored.db_password:
        raise ProvisioningError(f"no ledger at {target.ledger_path}; database step has not run")

    return {
        "DB_NAME": stored.db_name,
        "DB_USER": stored.db_user,
        "DB_PASSWORD": stored.db_password,
    }


def config_current(ctx) -> bool:
    """wp-config.php exists and carries exactly the ledger's credentials."""
    path = config_path(ctx)
    if not ctx.host.exists(path) or not ctx.ledger.exists(ctx.target.domain):
        return False

    text = ctx.host.read_text(path)
    return all(
        parse_define(text, name) == value
        for name, value in _ledger_credentials(ctx).items()
    )


def write_config(host, settings, path: str, text: str) -> None:
    host.write_atomic(path, text, mode=CONFIG_MODE)
    host.chown(path, settings.service_user, settings.service_group)


def rewrite_credentials(host, settings, path: str, credentials: Dict[str, str]) -> None:
    """Rewrite only the given define() values of an existing wp-config.php."""
    lines = host.read_text(path).splitlines(keepends=True)
    for name, value in credentials.items():
        substitute_define(lines, name, value)
    rewritten = "".join(lines)

    for name, value in credentials.items():
        if parse_define(rewritten, name) != value:
            raise TemplateError(f"rewritten {name} in {path} does not match the ledger")

    write_config(host, settings, path, rewritten)


def render_config(ctx) -> None:
    """
    Render wp-config.php from the sample, or bring an existing one back in
    line with the ledger.

    Credentials come from the ledger itself so the file can never carry a
    password the ledger does not. An existing file keeps its salts and any
    hand edits; only its DB_* lines are rewritten.
    """
    target = ctx.target
    settings = ctx.settings
    credentials = _ledger_credentials(ctx)
    path = config_path(ctx)

    if ctx.host.exists(path):
        rewrite_credentials(ctx.host, settings, path, credentials)
        logger.info(f"[wordpress] reconciled credentials in {path} with the ledger")
        return

    template = ctx.host.read_text(os.path.join(target.web_root, SAMPLE_NAME))

    # Network failure here must abort before anything is written
    salt_block = ctx.salts.fetch_salt_block()

    rendered = render(template, credentials, salt_block)

    if parse_define(rendered, "DB_PASSWORD") != credentials["DB_PASSWORD"]:
        raise TemplateError("rendered DB_PASSWORD does not round-trip to the ledger value")

    write_config(ctx.host, settings, path, rendered)
    logger.info(f"[wordpress] wrote {path}")


# ============================================
# 7. WP-CONTENT PERMISSIONS (always reapplied)
# ============================================

def uploads_dir(ctx) -> str:
    return os.path.join(ctx.target.web_root, "wp-content", "uploads")


def uploads_present(ctx) -> bool:
    return ctx.host.is_dir(uploads_dir(ctx))


def fix_content_permissions(ctx) -> None:
    settings = ctx.settings
    user, group = settings.service_user, settings.service_group

    ctx.host.ensure_dir(uploads_dir(ctx), 0o775, user, group)
    ctx.host.chown_tree(ctx.target.web_root, user, group)
    ctx.host.chmod_tree(os.path.join(ctx.target.web_root, "wp-content"), 0o775, 0o664)
