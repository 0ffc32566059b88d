"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from namereg.domain.ports import ProcessState

NameStr = Annotated[
    str,
    StringConstraints(min_length=1, max_length=255, pattern=r"^[^\x00-\x1f\x7f]+$"),
]


class RegisterRequest(BaseModel):
    """Request model for starting a registration."""

    name: NameStr = Field(..., description="Name to claim, e.g. d/example")
    value: str = Field("", description="Value to publish once the name is finalized")
    passphrase: str | None = Field(None, description="Wallet passphrase, if the wallet is locked")


class BatchRegisterRequest(BaseModel):
    """Request model for registering several names with one value."""

    names: list[NameStr] = Field(..., min_length=1)
    value: str = ""
    passphrase: str | None = None


class AdvanceRequest(BaseModel):
    """Request model for finalizing all ready registrations."""

    passphrase: str | None = None
    fail_fast: bool = Field(False, description="Stop at the first failing registration")


class RegistrationResponse(BaseModel):
    """Response model for a started registration."""

    name: str
    state: ProcessState


class RegistrationStatus(BaseModel):
    """Status of one tracked registration."""

    name: str
    state: ProcessState
    can_finalize: bool | None = None
    settled: bool | None = None


class RegistrationListResponse(BaseModel):
    """Response model for the registration overview."""

    registrations: list[RegistrationStatus]


class BatchRegisterResponse(BaseModel):
    """Response model for a bulk registration."""

    registrations: list[RegistrationResponse]


class AdvanceResponse(BaseModel):
    """Response model for a successful advance pass."""

    finalized: list[str]


class CleanupResponse(BaseModel):
    """Response model for a clean up pass."""

    removed: int


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
