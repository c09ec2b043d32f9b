"""Pydantic schemas for the persisted run ledger."""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wp_provisioner.core.models import Target


class LedgerRecord(BaseModel):
    """One ledger file, keyed the way the shell installers wrote it."""

    db_name: str = Field(alias="DB_NAME", min_length=1)
    db_user: str = Field(alias="DB_USER", min_length=1)
    db_pass: str = Field(alias="DB_PASS", min_length=1)
    domain: str = Field(alias="DOMAIN", min_length=1)
    web_root: str = Field(alias="WEB_ROOT", min_length=1)
    cert_email: str = Field(default="", alias="CERT_EMAIL")

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    @field_validator("db_name", "db_user", "db_pass", "domain", "web_root", "cert_email")
    @classmethod
    def single_line(cls, value: str) -> str:
        if "\n" in value or "\r" in value:
            raise ValueError("ledger values must be single-line")
        return value

    @classmethod
    def from_target(cls, target: Target) -> "LedgerRecord":
        return cls(
            DB_NAME=target.db_name,
            DB_USER=target.db_user,
            DB_PASS=target.db_password or "",
            DOMAIN=target.domain,
            WEB_ROOT=target.web_root,
            CERT_EMAIL=target.cert_email,
        )

    def to_lines(self) -> str:
        data: Dict[str, str] = self.model_dump(by_alias=True)
        return "".join(f"{key}={value}\n" for key, value in data.items())
