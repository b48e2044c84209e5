"""Result notification port and the structured outcome it consumes."""

from enum import StrEnum
from typing import Protocol

from pydantic import BaseModel, Field


class OutcomeKind(StrEnum):
    """Terminal state of a user-triggered operation."""

    SIGNED = "signed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    FAILED = "failed"


class Outcome(BaseModel):
    """Structured result of a sign or verify operation."""

    kind: OutcomeKind = Field(..., description="Terminal state of the operation")
    message: str = Field(..., description="Human-readable summary")
    error_kind: str | None = Field(
        default=None, description="Error class name when kind is 'failed'"
    )
    artifact: str | None = Field(
        default=None, description="Locator of the presented artifact, if any"
    )

    @property
    def ok(self) -> bool:
        return self.kind in (OutcomeKind.SIGNED, OutcomeKind.ACCEPTED)


class ResultNotifierPort(Protocol):
    """Port interface surfacing outcomes to the user.

    Presentation is entirely up to the adapter.
    """

    def notify(self, outcome: Outcome) -> None:
        """Report ``outcome``."""
        ...
