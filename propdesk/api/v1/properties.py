"""Property listing and management endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from propdesk.api.v1._authz import require_user, viewer_or_anonymous
from propdesk.auth.role_cache import RoleCacheRegistry
from propdesk.core.dependencies import get_db_session, get_role_registry
from propdesk.schemas.properties import (
    PropertyCreateRequest,
    PropertyDetailResponse,
    PropertyResponse,
    PropertyUpdateRequest,
)
from propdesk.services.property_filters import DEFAULT_PAGE_SIZE, PropertyFilterState
from propdesk.services.property_service import PropertyService

router = APIRouter(tags=["properties"])


@router.get("/properties")
def list_properties(
    request: Request,
    page_size: int = DEFAULT_PAGE_SIZE,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    """Public catalogue for anonymous callers, full listing for signed-in staff."""
    user = viewer_or_anonymous(authorization, registry=registry)
    if page_size < 1 or page_size > 200:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="page_size must be between 1 and 200.")
    try:
        state = PropertyFilterState.from_query(request.query_params, page_size=page_size)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    page = PropertyService(db).fetch_properties(
        state.filters,
        state.sort,
        state.pagination,
        viewer=user.viewer if user else None,
    )
    state.update_total(page.total)
    return {
        "items": [PropertyResponse.model_validate(prop).model_dump(mode="json") for prop in page.items],
        "total": page.total,
        "page": state.page,
        "page_size": state.page_size,
        "total_pages": state.total_pages,
        "description": state.description,
    }


@router.get("/properties/{property_id}", response_model=PropertyDetailResponse)
def get_property(
    property_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> PropertyDetailResponse:
    user = viewer_or_anonymous(authorization, registry=registry)
    prop = PropertyService(db).fetch_property(property_id, viewer=user.viewer if user else None)
    if prop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Property not found: {property_id}")
    return PropertyDetailResponse.model_validate(prop)


@router.post("/properties", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
def create_property(
    payload: PropertyCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> PropertyResponse:
    user = require_user(authorization, ["properties.write"], registry=registry)
    prop = PropertyService(db).create_property(payload.model_dump(), viewer=user.viewer)
    return PropertyResponse.model_validate(prop)


@router.patch("/properties/{property_id}", response_model=PropertyResponse)
def update_property(
    property_id: str,
    payload: PropertyUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> PropertyResponse:
    require_user(authorization, ["properties.write"], registry=registry)
    prop = PropertyService(db).update_property(property_id, payload.model_dump(exclude_unset=True))
    if prop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Property not found: {property_id}")
    return PropertyResponse.model_validate(prop)


@router.delete("/properties/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(
    property_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> None:
    require_user(authorization, ["properties.write"], registry=registry)
    if not PropertyService(db).delete_property(property_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Property not found: {property_id}")
