"""Domain models for sealkey."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .errors import MalformedEnvelope

SALT_SIZE = 16
NONCE_SIZE = 12
HEADER_SIZE = 1 + SALT_SIZE + NONCE_SIZE


class Envelope(BaseModel):
    """An encrypted blob as it sits on disk.

    Layout: ``cost(1) || salt(16) || nonce(12) || ciphertext``. There is no
    magic number or version tag; the cost and salt travel with the data so
    every envelope can be opened on its own.
    """

    model_config = ConfigDict(frozen=True)

    cost: int = Field(ge=0, le=255)
    salt: bytes = Field(min_length=SALT_SIZE, max_length=SALT_SIZE)
    nonce: bytes = Field(min_length=NONCE_SIZE, max_length=NONCE_SIZE)
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        return bytes([self.cost]) + self.salt + self.nonce + self.ciphertext

    @classmethod
    def from_bytes(cls, data: bytes) -> "Envelope":
        """Split raw vault bytes into their fields."""
        if len(data) < HEADER_SIZE:
            raise MalformedEnvelope()
        return cls(
            cost=data[0],
            salt=data[1 : 1 + SALT_SIZE],
            nonce=data[1 + SALT_SIZE : HEADER_SIZE],
            ciphertext=data[HEADER_SIZE:],
        )


class Record(BaseModel):
    """A single stored secret."""

    key: str
    value: str


class ActiveVault(BaseModel):
    """Pointer to the vault the CLI works against."""

    path: Path
