"""
Property API routes - Rentwise
Browsing and discovery for everyone signed in; property and unit
management for the owning landlord or an admin.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from pydantic import BaseModel

from rentwise.api.auth import get_request_context, require_roles
from rentwise.config import get_settings
from rentwise.models import (
    Notification,
    Property,
    PropertyCreate,
    PropertyImage,
    PropertyUpdate,
    Rating,
    RatingCreate,
    RequestContext,
    Role,
    Unit,
    UnitCreate,
    UnitUpdate,
)
from rentwise.services.property_search import SortKey, average_rating, rent_range, search_properties
from rentwise.services.property_service import PropertyService
from rentwise.services.storage_service import delete_object, save_property_image

router = APIRouter(tags=["Properties"])

property_service = PropertyService()


class PropertyCard(Property):
    """Property with the figures its card displays."""
    average_rating: float = 0
    available_units: int = 0
    total_units: int = 0
    min_rent: float = 0
    max_rent: float = 0
    can_manage: bool = False


class PropertyResponse(BaseModel):
    property: Property
    notification: Notification


class UnitResponse(BaseModel):
    unit: Unit
    notification: Notification


class ImageResponse(BaseModel):
    image: PropertyImage
    notification: Notification


class RatingResponse(BaseModel):
    rating: Rating
    notification: Notification


class DeletedResponse(BaseModel):
    deleted: bool
    notification: Notification


def _card(ctx: RequestContext, prop: Property) -> PropertyCard:
    low, high = rent_range(prop)
    return PropertyCard(
        **prop.model_dump(),
        average_rating=round(average_rating(prop.ratings), 1),
        available_units=sum(1 for u in prop.units if u.is_available),
        total_units=len(prop.units),
        min_rent=low,
        max_rent=high,
        can_manage=PropertyService.can_manage(ctx, prop),
    )


@router.get("/properties", response_model=List[PropertyCard])
async def list_properties(
    q: Optional[str] = Query(None, description="Name or address contains (case-insensitive)"),
    mine: bool = Query(False, description="Only properties owned by the caller"),
    ctx: RequestContext = Depends(get_request_context),
):
    """GET: All properties with units, images and ratings."""
    props = property_service.list_properties(ctx.user_id if mine else None)
    if q:
        needle = q.lower()
        props = [p for p in props if needle in p.name.lower() or needle in p.address.lower()]
    return [_card(ctx, p) for p in props]


@router.get("/properties/search", response_model=List[PropertyCard])
async def search(
    q: Optional[str] = Query(None, description="Name or address contains (case-insensitive)"),
    min_rent: Optional[float] = Query(None, ge=0),
    max_rent: Optional[float] = Query(None, ge=0),
    sort: SortKey = Query(SortKey.NAME),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    GET: Property discovery.

    Only properties with available units are returned. A property matches
    the rent window when the range of its available-unit rents overlaps
    [min_rent, max_rent].
    """
    if max_rent is None:
        max_rent = get_settings().default_max_rent
    props = search_properties(property_service.list_properties(), q, min_rent, max_rent, sort)
    return [_card(ctx, p) for p in props]


@router.get("/properties/{property_id}", response_model=PropertyCard)
async def get_property(property_id: str, ctx: RequestContext = Depends(get_request_context)):
    return _card(ctx, property_service.get_property(property_id))


@router.post("/properties", response_model=PropertyResponse)
async def create_property(
    body: PropertyCreate,
    ctx: RequestContext = Depends(require_roles(Role.LANDLORD, Role.ADMIN)),
):
    prop = property_service.create_property(ctx, body)
    return PropertyResponse(property=prop, notification=Notification(title="Property created successfully"))


@router.patch("/properties/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: str,
    body: PropertyUpdate,
    ctx: RequestContext = Depends(get_request_context),
):
    prop = property_service.update_property(ctx, property_id, body)
    return PropertyResponse(property=prop, notification=Notification(title="Property updated successfully"))


@router.delete("/properties/{property_id}", response_model=DeletedResponse)
async def delete_property(property_id: str, ctx: RequestContext = Depends(get_request_context)):
    images = property_service.get_property(property_id).images
    property_service.delete_property(ctx, property_id)
    for image in images:
        delete_object(image.url)
    return DeletedResponse(deleted=True, notification=Notification(title="Property deleted successfully"))


@router.post("/properties/{property_id}/images", response_model=ImageResponse)
async def upload_image(
    property_id: str,
    file: UploadFile = File(...),
    ctx: RequestContext = Depends(get_request_context),
):
    """POST: Upload an image to storage and attach it to the property."""
    property_service.managed_property(ctx, property_id, "Error uploading image")
    url = save_property_image(ctx.user_id, property_id, file.filename or "", file.file)
    try:
        image = property_service.add_image(ctx, property_id, url)
    except Exception:
        delete_object(url)
        raise
    return ImageResponse(image=image, notification=Notification(title="Image uploaded successfully"))


@router.post("/properties/{property_id}/ratings", response_model=RatingResponse)
async def rate_property(
    property_id: str,
    body: RatingCreate,
    ctx: RequestContext = Depends(get_request_context),
):
    rating = property_service.add_rating(ctx, property_id, body)
    return RatingResponse(rating=rating, notification=Notification(title="Rating saved"))


@router.post("/properties/{property_id}/units", response_model=UnitResponse)
async def create_unit(
    property_id: str,
    body: UnitCreate,
    ctx: RequestContext = Depends(get_request_context),
):
    unit = property_service.create_unit(ctx, property_id, body)
    return UnitResponse(unit=unit, notification=Notification(title="Unit created successfully"))


@router.patch("/units/{unit_id}", response_model=UnitResponse)
async def update_unit(unit_id: str, body: UnitUpdate, ctx: RequestContext = Depends(get_request_context)):
    unit = property_service.update_unit(ctx, unit_id, body)
    return UnitResponse(unit=unit, notification=Notification(title="Unit updated successfully"))


@router.delete("/units/{unit_id}", response_model=DeletedResponse)
async def delete_unit(unit_id: str, ctx: RequestContext = Depends(get_request_context)):
    property_service.delete_unit(ctx, unit_id)
    return DeletedResponse(deleted=True, notification=Notification(title="Unit deleted successfully"))
