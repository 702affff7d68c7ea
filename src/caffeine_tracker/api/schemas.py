"""Pydantic models for API request payloads."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

TimeMode = Literal["24h", "ampm"]


class EntryCreate(BaseModel):
    """Form payload for a new caffeine entry."""

    date: str = Field(pattern=r"^\s*\d{1,2}/\d{1,2}\s*$")
    time: str = Field(min_length=1)
    amount: float = Field(allow_inf_nan=False, ge=-9999.99, le=9999.99)

    @field_validator("date", "time")
    @classmethod
    def _strip(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class Credentials(BaseModel):
    """Email and password submitted to the auth endpoints."""

    email: str = Field(min_length=3)
    password: str = Field(min_length=6)
