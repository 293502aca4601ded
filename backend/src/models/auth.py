"""Authentication models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class JWTPayload(BaseModel):
    """JWT claims payload."""

    sub: str = Field(..., description="Subject (user_id)")
    iat: int = Field(..., description="Issued at timestamp")
    exp: int = Field(..., description="Expiration timestamp")
    purpose: Optional[str] = Field(
        None, description="Restricted token purpose (e.g. 'mfa'); absent for API tokens"
    )


__all__ = ["JWTPayload"]
