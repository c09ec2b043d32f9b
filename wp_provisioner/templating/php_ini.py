# wp_provisioner/templating/php_ini.py
import re
from typing import Dict


def _directive(name: str):
    # Active lines only; ';' comments are left alone
    return re.compile(r"^\s*" + re.escape(name) + r"\s*=.*$")


def set_ini_directives(text: str, values: Dict[str, str]) -> str:
    """Set every active occurrence of each directive, appending missing ones."""
    lines = text.splitlines(keepends=True)

    for name, value in values.items():
        pattern = _directive(name)
        found = False

        for index, line in enumerate(lines):
            body = line.rstrip("\r\n")
            if pattern.match(body):
                lines[index] = f"{name} = {value}" + line[len(body):]
                found = True

        if not found:
            if lines and not lines[-1].endswith("\n"):
                lines[-1] += "\n"
            lines.append(f"{name} = {value}\n")

    return "".join(lines)


def read_ini_directives(text: str) -> Dict[str, str]:
    """Active directives; later lines win as they do in PHP."""
    result = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith((";", "[")) or "=" not in stripped:
            continue
        name, value = stripped.split("=", 1)
        result[name.strip()] = value.strip()
    return result
