# wp_provisioner/templating/wp_config.py
"""
Line-oriented templating for wp-config.php.

Only the value of a named define() is ever rewritten; every other byte of
the template is carried over untouched.
"""

import re
from typing import Dict, List, Optional

from wp_provisioner.core.errors import TemplateError
from wp_provisioner.credentials.salts import SALT_NAMES


_DEFINE = re.compile(
    r"""^(?P<head>\s*define\(\s*(?P<q>['"])(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?P=q)\s*,\s*)"""
    r"""(?P<value>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|[^)]*?)"""
    r"""(?P<tail>\s*\)\s*;.*)$""",
    re.DOTALL,
)


def php_quote(value: str) -> str:
    """Quote a value as a PHP single-quoted string literal."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def php_unquote(literal: str) -> str:
    """Inverse of php_quote for single-quoted literals; other forms are returned stripped."""
    literal = literal.strip()
    if len(literal) >= 2 and literal[0] == literal[-1] == "'":
        body = literal[1:-1]
        return re.sub(r"\\([\\'])", r"\1", body)
    if len(literal) >= 2 and literal[0] == literal[-1] == '"':
        return literal[1:-1]
    return literal


def _match_define(line: str):
    return _DEFINE.match(line.rstrip("\r\n"))


def parse_define(text: str, name: str) -> Optional[str]:
    """Return the unquoted value of the first define() of name, or None."""
    for line in text.splitlines():
        match = _match_define(line)
        if match and match.group("name") == name:
            return php_unquote(match.group("value"))
    return None


def substitute_define(lines: List[str], name: str, value: str) -> None:
    """Rewrite the value of the first define() of name in place."""
    for index, line in enumerate(lines):
        match = _match_define(line)
        if not match or match.group("name") != name:
            continue

        ending = line[len(line.rstrip("\r\n")):]
        lines[index] = (
            match.group("head") + php_quote(value) + match.group("tail") + ending
        )
        return

    raise TemplateError(f"template has no define() for {name}")


def replace_salt_block(lines: List[str], salt_block: str) -> List[str]:
    """
    Swap the span from the first through the last salt define() for the
    fresh block, or append the block when the template has none.
    """
    positions = []
    for index, line in enumerate(lines):
        match = _match_define(line)
        if match and match.group("name") in SALT_NAMES:
            positions.append(index)

    block = salt_block if salt_block.endswith("\n") else salt_block + "\n"
    block_lines = block.splitlines(keepends=True)

    if not positions:
        tail = list(lines)
        if tail and not tail[-1].endswith("\n"):
            tail[-1] += "\n"
        return tail + block_lines

    first, last = positions[0], positions[-1]
    return lines[:first] + block_lines + lines[last + 1:]


def render(template: str, substitutions: Dict[str, str], salt_block: str) -> str:
    """
    Render wp-config.php from wp-config-sample.php.

    Args:
        template: Sample file contents
        substitutions: define() name -> raw value (DB_NAME, DB_USER, ...)
        salt_block: Validated salt definitions

    Returns:
        Rendered file contents

    Raises:
        TemplateError: If a substituted define() is missing or the salt
            block is empty
    """
    if not salt_block or not salt_block.strip():
        raise TemplateError("refusing to render without a salt block")

    lines = template.splitlines(keepends=True)

    for name, value in substitutions.items():
        substitute_define(lines, name, value)

    return "".join(replace_salt_block(lines, salt_block))
