"""
Authentication API endpoints.

Identities are managed by the external identity provider. These endpoints
provision a profile on first login, expose the current profile, and revoke
the presented token on logout.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError as ClaimsValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.models.profile import Profile
from backend.app.schemas.auth import IdentityClaims, ProvisionResponse, LogoutResponse
from backend.app.schemas.profile import ProfileResponse
from backend.app.core.dependencies import get_current_user, get_token_payload
from backend.app.core.exceptions import AuthenticationError
from backend.app.core.token_revocation import revoke_token
from backend.app.services.audit import log_event, AuditAction
from backend.app.services.provisioning import ProvisioningService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/provision", response_model=ProvisionResponse)
async def provision_profile(
    request: Request,
    payload: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db)
):
    """
    Create the caller's profile on first login.

    Idempotent: repeated calls return the existing profile with
    created=false and never grant the signup bonus twice. Missing profile
    fields are filled from the identity claims.
    """
    try:
        identity = IdentityClaims.from_token_payload(payload)
    except ClaimsValidationError:
        raise AuthenticationError("Token is missing identity claims")

    profile, created = await ProvisioningService.provision(db, identity)

    if created:
        await log_event(
            db=db,
            action=AuditAction.PROFILE_PROVISIONED,
            actor_id=profile.id,
            target_user_id=profile.id,
            metadata={"email": profile.email, "signup_credits": profile.credits},
            ip_address=request.client.host if request.client else None
        )

    return ProvisionResponse(
        created=created,
        profile=ProfileResponse.model_validate(profile)
    )


@router.get("/me", response_model=ProfileResponse)
async def get_current_profile(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the current authenticated profile, including credit balance.

    Raises:
        404: If the profile disappeared after authentication
    """
    profile = await db.get(Profile, current_user["user_id"], populate_existing=True)

    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )

    return ProfileResponse.model_validate(profile)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    request: Request,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Revoke the bearer token used for this request.

    Subsequent requests with the same token receive 401.
    """
    revoked = await revoke_token(current_user["token"], current_user["user_id"])

    if revoked:
        await log_event(
            db=db,
            action=AuditAction.TOKEN_REVOKED,
            actor_id=current_user["user_id"],
            target_user_id=current_user["user_id"],
            ip_address=request.client.host if request.client else None
        )

    return LogoutResponse(revoked=revoked)
