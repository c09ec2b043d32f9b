# wp_provisioner/core/errors.py

# -----------------------------
# Base Errors
# -----------------------------

class ProvisioningError(Exception):
    """Base class for all provisioning errors."""
    pass


# -----------------------------
# Input Errors
# -----------------------------

class UsageError(ProvisioningError):
    """Missing or malformed command-line input."""
    pass


class PasswordPolicyError(ProvisioningError):
    """Password policy too weak or malformed."""
    pass


# -----------------------------
# State Errors
# -----------------------------

class CorruptState(ProvisioningError):
    """Persisted state is unreadable or disagrees with the host."""
    pass


class RunInProgress(ProvisioningError):
    """Another run holds the lock for this domain."""
    pass


# -----------------------------
# Execution Errors
# -----------------------------

class StepFailed(ProvisioningError):
    """A provisioning step failed or left its postcondition unmet."""

    def __init__(self, step_id: str, cause, report=None):
        self.step_id = step_id
        self.cause = cause
        self.report = report
        super().__init__(f"step '{step_id}' failed: {cause}")


class CommandError(ProvisioningError):
    """External command exited non-zero."""

    def __init__(self, argv, returncode: int, stderr: str = ""):
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else "no output"
        super().__init__(
            f"{' '.join(self.argv)} exited with {returncode}: {detail}"
        )


class TransientError(ProvisioningError):
    """Failure that may succeed if retried (network, 5xx)."""
    pass


class SaltFetchError(ProvisioningError):
    """Salt block could not be fetched or was malformed."""
    pass


class TemplateError(ProvisioningError):
    """A template lacks a declaration that must be substituted."""
    pass
