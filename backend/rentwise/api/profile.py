"""Profile routes: read and edit the caller's own profile."""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from rentwise.api.auth import get_request_context
from rentwise.models import Notification, Profile, ProfileUpdate, RequestContext
from rentwise.services.auth_service import profile_service

router = APIRouter(prefix="/profile", tags=["Profile"])


class ProfileResponse(BaseModel):
    profile: Profile
    notification: Notification


@router.get("", response_model=Profile)
async def get_profile(ctx: RequestContext = Depends(get_request_context)):
    return ctx.profile


@router.patch("", response_model=ProfileResponse)
async def update_profile(body: ProfileUpdate, ctx: RequestContext = Depends(get_request_context)):
    profile = profile_service.update_profile(ctx, body)
    return ProfileResponse(profile=profile, notification=Notification(title="Profile updated successfully"))
