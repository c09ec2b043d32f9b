# wp_provisioner/templating/apache.py
"""Apache site and global config rendering/editing."""

import re
from typing import Optional

from wp_provisioner.core.models import Target


VHOST_TEMPLATE = """<VirtualHost *:80>
    ServerName {domain}
    ServerAlias www.{domain}
    DocumentRoot {web_root}
    <Directory {web_root}>
        Options Indexes FollowSymLinks
        AllowOverride All
        Require all granted
    </Directory>
    ErrorLog ${{APACHE_LOG_DIR}}/{domain}_error.log
    CustomLog ${{APACHE_LOG_DIR}}/{domain}_access.log combined
</VirtualHost>
"""

_DOCUMENT_ROOT = re.compile(r"^(?P<indent>\s*)DocumentRoot\s+(?P<path>\S+)\s*$")
_DIRECTORY_OPEN = re.compile(r"^(?P<indent>\s*)<Directory\s+\"?(?P<path>[^\">]+?)\"?\s*>\s*$")
_DIRECTORY_CLOSE = re.compile(r"^\s*</Directory>\s*$")
_ALLOW_OVERRIDE = re.compile(r"^(?P<indent>\s*)AllowOverride\s+None\s*$")


def render_vhost(target: Target) -> str:
    """Virtual host for target.domain and www.target.domain."""
    return VHOST_TEMPLATE.format(domain=target.domain, web_root=target.web_root)


def document_root(text: str) -> Optional[str]:
    """First DocumentRoot in a site config."""
    for line in text.splitlines():
        match = _DOCUMENT_ROOT.match(line)
        if match:
            return match.group("path")
    return None


def point_default_site(text: str, web_root: str) -> str:
    """Repoint DocumentRoot and any <Directory> blocks of a site at web_root."""
    out = []
    for line in text.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        ending = line[len(body):]

        match = _DOCUMENT_ROOT.match(body)
        if match:
            out.append(f"{match.group('indent')}DocumentRoot {web_root}{ending}")
            continue

        match = _DIRECTORY_OPEN.match(body)
        if match:
            out.append(f"{match.group('indent')}<Directory {web_root}>{ending}")
            continue

        out.append(line)
    return "".join(out)


def enable_overrides(text: str, directory: str) -> str:
    """
    Turn "AllowOverride None" into "AllowOverride All" inside the
    <Directory> block for the given path only (e.g. /var/www), leaving the
    filesystem root and other blocks locked down.
    """
    wanted = directory.rstrip("/") or "/"
    inside = False
    out = []

    for line in text.splitlines(keepends=True):
        body = line.rstrip("\r\n")
        ending = line[len(body):]

        opened = _DIRECTORY_OPEN.match(body)
        if opened:
            inside = (opened.group("path").rstrip("/") or "/") == wanted
        elif _DIRECTORY_CLOSE.match(body):
            inside = False
        elif inside:
            match = _ALLOW_OVERRIDE.match(body)
            if match:
                out.append(f"{match.group('indent')}AllowOverride All{ending}")
                continue

        out.append(line)
    return "".join(out)
