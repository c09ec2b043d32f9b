# wp_provisioner/credentials/generator.py
"""Database password generation under an enforced entropy floor."""

import math
import secrets

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from wp_provisioner.core.errors import PasswordPolicyError


MIN_LENGTH = 16
MIN_ENTROPY_BITS = 96


class PasswordPolicy(BaseModel):
    """Alphabet and length for generated database passwords."""

    length: int = Field(default=24, ge=MIN_LENGTH, le=256)
    alphabet: str

    model_config = ConfigDict(frozen=True)

    @field_validator("alphabet")
    @classmethod
    def printable_unique(cls, value: str) -> str:
        if any(ch.isspace() or not ch.isprintable() for ch in value):
            raise ValueError("alphabet must not contain whitespace or control characters")
        if len(set(value)) != len(value):
            raise ValueError("alphabet contains duplicate characters")
        return value

    @model_validator(mode="after")
    def entropy_floor(self):
        if self.entropy_bits() < MIN_ENTROPY_BITS:
            raise ValueError(
                f"policy yields {self.entropy_bits():.0f} bits, "
                f"below the {MIN_ENTROPY_BITS}-bit floor"
            )
        return self

    def entropy_bits(self) -> float:
        if len(self.alphabet) < 2:
            return 0.0
        return self.length * math.log2(len(self.alphabet))

    @classmethod
    def build(cls, length: int, alphabet: str) -> "PasswordPolicy":
        """Validate a policy, mapping validation failures to PasswordPolicyError."""
        try:
            return cls(length=length, alphabet=alphabet)
        except ValidationError as e:
            reasons = "; ".join(err["msg"] for err in e.errors())
            raise PasswordPolicyError(f"weak password policy: {reasons}") from None


def generate_password(policy: PasswordPolicy) -> str:
    """Draw policy.length characters from policy.alphabet with the CSPRNG."""
    return "".join(secrets.choice(policy.alphabet) for _ in range(policy.length))
