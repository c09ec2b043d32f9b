# wp_provisioner/core/validation.py
import re

from wp_provisioner.core.errors import UsageError


_LABEL = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")


def normalize_domain(domain: str) -> str:
    """Lowercase and strip a domain, rejecting anything that is not a DNS name."""
    if domain is None:
        raise UsageError("domain is required")

    value = domain.strip().lower().rstrip(".")

    # -------------------------
    # Presence
    # -------------------------
    if not value:
        raise UsageError("domain is required")

    # -------------------------
    # Shape
    # -------------------------
    if len(value) > 253:
        raise UsageError(f"domain too long: {value!r}")

    if value.startswith("www."):
        raise UsageError(
            f"pass the bare domain, www.{value[4:]} is added as an alias"
        )

    labels = value.split(".")
    if len(labels) < 2:
        raise UsageError(f"domain must contain a dot: {value!r}")

    for label in labels:
        if not _LABEL.match(label):
            raise UsageError(f"invalid domain label {label!r} in {value!r}")

    return value


def clean_name(value: str) -> str:
    """Map a domain onto a MySQL-safe identifier fragment.

    Lowercases, turns every character outside [a-z0-9] into an underscore
    and strips one leading and one trailing underscore.
    """
    cleaned = re.sub(r"[^a-z0-9]", "_", value.lower())
    if cleaned.startswith("_"):
        cleaned = cleaned[1:]
    if cleaned.endswith("_"):
        cleaned = cleaned[:-1]
    return cleaned
