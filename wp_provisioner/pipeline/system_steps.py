# wp_provisioner/pipeline/system_steps.py
"""Host-level steps: packages, web root + vhost, PHP limits."""

import glob
import logging
import os

from wp_provisioner.core.models import LayoutMode
from wp_provisioner.templating.apache import (
    document_root, enable_overrides, point_default_site, render_vhost,
)
from wp_provisioner.templating.php_ini import read_ini_directives, set_ini_directives

logger = logging.getLogger(__name__)

WEB_ROOT_MODE = 0o2775    # setgid, group rwx, no world write
DOMAIN_DIR_MODE = 0o2755


# ============================================
# 1. PACKAGES
# ============================================

def packages_installed(ctx) -> bool:
    return not ctx.packages.missing(ctx.settings.packages)


def install_packages(ctx) -> None:
    missing = ctx.packages.missing(ctx.settings.packages)
    logger.info(f"[packages] missing: {' '.join(missing)}")
    ctx.packages.install(ctx.settings.packages, upgrade=ctx.settings.upgrade_system)


# ============================================
# 2. WEB ROOT + VHOST
# ============================================

def overrides_enabled(ctx) -> bool:
    """Global config already lets .htaccess override under the www root."""
    global_conf = ctx.settings.apache_global_conf
    if not ctx.host.exists(global_conf):
        return True
    text = ctx.host.read_text(global_conf)
    return enable_overrides(text, ctx.settings.www_root) == text


def vhost_provisioned(ctx) -> bool:
    target = ctx.target
    if not ctx.host.is_dir(target.web_root) or not ctx.host.exists(target.site_config):
        return False

    # A stock host already serves /var/www/html, but with overrides off
    if not overrides_enabled(ctx):
        return False

    if target.layout == LayoutMode.DEFAULT:
        return document_root(ctx.host.read_text(target.site_config)) == target.web_root

    return ctx.apache.is_site_enabled(target.site_config)


def provision_vhost(ctx) -> None:
    target = ctx.target
    settings = ctx.settings
    user, group = settings.service_user, settings.service_group

    if target.layout == LayoutMode.VHOST:
        ctx.host.ensure_dir(os.path.dirname(target.web_root), DOMAIN_DIR_MODE, user, group)
    ctx.host.ensure_dir(target.web_root, WEB_ROOT_MODE, user, group)

    if target.layout == LayoutMode.VHOST:
        ctx.host.write_atomic(target.site_config, render_vhost(target), mode=0o644)
        ctx.apache.enable_site(target.site_config)
    else:
        current = ctx.host.read_text(target.site_config)
        ctx.host.write_atomic(
            target.site_config, point_default_site(current, target.web_root), mode=0o644
        )

    global_conf = settings.apache_global_conf
    if ctx.host.exists(global_conf):
        current = ctx.host.read_text(global_conf)
        updated = enable_overrides(current, settings.www_root)
        if updated != current:
            ctx.host.write_atomic(global_conf, updated, mode=0o644)
            logger.info(f"[vhost] enabled .htaccess overrides under {settings.www_root}")

    ctx.apache.reload()
    logger.info(f"[vhost] {target.domain} served from {target.web_root}")


# ============================================
# 3. PHP LIMITS (always reapplied)
# ============================================

def _php_ini_files(ctx):
    return sorted(p for p in glob.glob(ctx.settings.php_ini_glob) if os.path.isfile(p))


def php_limits_applied(ctx) -> bool:
    wanted = ctx.settings.php_limits
    for path in _php_ini_files(ctx):
        active = read_ini_directives(ctx.host.read_text(path))
        if any(active.get(name) != value for name, value in wanted.items()):
            return False
    return True


def tune_php(ctx) -> None:
    files = _php_ini_files(ctx)
    if not files:
        logger.warning(f"[php] no files match {ctx.settings.php_ini_glob}")

    for path in files:
        current = ctx.host.read_text(path)
        updated = set_ini_directives(current, ctx.settings.php_limits)
        if updated != current:
            ctx.host.write_atomic(path, updated, mode=0o644)
            logger.info(f"[php] updated {path}")

    ctx.apache.restart()
    ctx.webserver_dirty = False
