# wp_provisioner/pipeline/tls_steps.py
import logging

logger = logging.getLogger(__name__)


# ============================================
# 9. CERTIFICATE (non-fatal)
# ============================================

def certificate_present(ctx) -> bool:
    return ctx.certbot.has_certificate(ctx.target.domain)


def issue_certificate(ctx) -> None:
    # certbot rewrites the apache config even when it fails half-way
    ctx.webserver_dirty = True
    ctx.certbot.issue(ctx.target.aliases, ctx.target.cert_email)


# ============================================
# 10. FINAL RELOAD
# ============================================

def webserver_settled(ctx) -> bool:
    return not ctx.webserver_dirty


def final_reload(ctx) -> None:
    ctx.apache.reload_or_restart()
    ctx.webserver_dirty = False
