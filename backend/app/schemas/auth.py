"""
Authentication Pydantic schemas.

Defines the identity claims carried by bearer tokens and the responses of
the authentication endpoints.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Any, Dict, Optional
from uuid import UUID

from backend.app.schemas.profile import ProfileResponse


class IdentityClaims(BaseModel):
    """
    Identity asserted by a verified bearer token.

    Built from the token payload: `sub` is the identity id, profile hints
    come from `user_metadata` (populated by third-party identity providers).
    """
    id: UUID = Field(..., description="Identity id (token subject)")
    email: EmailStr = Field(..., description="Identity email address")
    full_name: Optional[str] = Field(default=None, description="Display name")
    avatar_url: Optional[str] = Field(default=None, description="Avatar image URL")

    @classmethod
    def from_token_payload(cls, payload: Dict[str, Any]) -> "IdentityClaims":
        metadata = payload.get("user_metadata") or {}
        email = payload.get("email")
        full_name = metadata.get("full_name") or metadata.get("name")
        if not full_name and email:
            full_name = email.split("@")[0]

        return cls(
            id=payload.get("sub"),
            email=email,
            full_name=full_name,
            avatar_url=metadata.get("avatar_url")
        )


class ProvisionResponse(BaseModel):
    """
    Schema for the first-login provisioning response.

    `created` is True only for the request that inserted the profile.
    """
    created: bool
    profile: ProfileResponse


class LogoutResponse(BaseModel):
    revoked: bool
