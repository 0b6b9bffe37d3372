"""
Setup configuration — the validated settings for one provisioning run.

Built once by the config loader (CLI > env > YAML file > defaults),
validated here, then passed by reference through the whole pipeline.
Frozen: nothing downstream may mutate it.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# OpenSSH public key type prefixes accepted in authorized_keys
KEY_TYPE_PREFIXES = (
    "ssh-ed25519",
    "ssh-rsa",
    "ssh-dss",
    "ecdsa-sha2-",
    "sk-ssh-ed25519@openssh.com",
    "sk-ecdsa-sha2-",
)

_WHITESPACE = re.compile(r"\s")


class SetupConfig(BaseModel):
    """Validated SSH setup settings."""

    model_config = ConfigDict(frozen=True)

    public_key: str
    port: int = Field(default=22, ge=1, le=65535)
    mode: Literal["root", "user", "auto"] = "auto"
    allow_users: list[str] = Field(default_factory=list)
    default_cwd: str
    disable_force_cwd: bool = False
    cwd: str                            # where .runner-data/ lives

    @field_validator("public_key")
    @classmethod
    def _check_public_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("public key is required")
        if not value.startswith(KEY_TYPE_PREFIXES):
            raise ValueError(
                "public key must be an OpenSSH public key (e.g. 'ssh-ed25519 AAAA...')"
            )
        if len(value.split()) < 2:
            raise ValueError("public key is missing its base64 body")
        return value

    @field_validator("allow_users")
    @classmethod
    def _check_allow_users(cls, value: list[str]) -> list[str]:
        users = [u.strip() for u in value if u.strip()]
        if not users:
            raise ValueError("at least one allowed user is required")
        for user in users:
            if _WHITESPACE.search(user):
                raise ValueError(f"invalid user name: {user!r}")
        # Blank entries are kept; rendering filters them.
        return value

    @field_validator("default_cwd", "cwd")
    @classmethod
    def _check_path(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("path must not be empty")
        return value

    @property
    def users(self) -> list[str]:
        """Allowed users with blank entries dropped, order preserved."""
        return [u.strip() for u in self.allow_users if u.strip()]

    @property
    def force_cwd(self) -> bool:
        return not self.disable_force_cwd
