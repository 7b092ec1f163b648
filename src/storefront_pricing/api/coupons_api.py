"""
Coupons API - FastAPI router for coupon management.
"""
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..engine.models import Coupon
from ..services.coupon_service import CouponService
from .state import AppState, get_state

router = APIRouter(prefix="/api/coupons", tags=["coupons"])


def get_coupon_service(state: AppState = Depends(get_state)) -> CouponService:
    return state.coupon_service


# Pydantic models for API
class CouponCreate(BaseModel):
    """Request model for creating a coupon."""
    code: str
    discount_type: Literal["percentage", "amount"] = "percentage"
    discount_value: float = 10
    category_type: Literal["Universal", "Kits", "Components"] = "Universal"
    status: Literal["active", "paused"] = "active"
    expiry_date: Optional[datetime] = None


class CouponUpdate(BaseModel):
    """Request model for updating a coupon."""
    code: Optional[str] = None
    discount_type: Optional[Literal["percentage", "amount"]] = None
    discount_value: Optional[float] = None
    category_type: Optional[Literal["Universal", "Kits", "Components"]] = None
    status: Optional[Literal["active", "paused"]] = None
    expiry_date: Optional[datetime] = None


class CouponResponse(BaseModel):
    """Response model for a coupon."""
    coupon_id: str
    code: str
    discount_type: str
    discount_value: float
    category_type: str
    status: str
    expiry_date: Optional[datetime]
    usage_count: int


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def _to_response(coupon: Coupon) -> CouponResponse:
    return CouponResponse(**coupon.__dict__)


# Endpoints

@router.get("", response_model=list[CouponResponse])
async def list_coupons(include_paused: bool = True, service: CouponService = Depends(get_coupon_service)):
    """List all coupons."""
    return [_to_response(c) for c in service.list_coupons(include_paused=include_paused)]


@router.get("/stats")
async def get_stats(service: CouponService = Depends(get_coupon_service)):
    """Get coupon statistics."""
    return service.get_stats()


@router.get("/{coupon_id}", response_model=CouponResponse)
async def get_coupon(coupon_id: str, service: CouponService = Depends(get_coupon_service)):
    """Get a single coupon by ID."""
    coupon = service.get_coupon(coupon_id)
    if not coupon:
        raise HTTPException(status_code=404, detail=f"Coupon '{coupon_id}' not found")
    return _to_response(coupon)


@router.post("", response_model=CouponResponse)
async def create_coupon(coupon_data: CouponCreate, service: CouponService = Depends(get_coupon_service)):
    """Create a new coupon."""
    coupon = Coupon(**coupon_data.model_dump())

    validation = service.validate_coupon(coupon)
    if not validation.valid:
        raise HTTPException(status_code=400, detail={"errors": validation.errors})

    try:
        return _to_response(service.create_coupon(coupon))
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/{coupon_id}", response_model=CouponResponse)
async def update_coupon(coupon_id: str, updates: CouponUpdate, service: CouponService = Depends(get_coupon_service)):
    """Update an existing coupon."""
    existing = service.get_coupon(coupon_id)
    if not existing:
        raise HTTPException(status_code=404, detail=f"Coupon '{coupon_id}' not found")

    # Only fields present in the request body are applied
    update_dict = updates.model_dump(exclude_unset=True)

    candidate = Coupon(**{**existing.__dict__, **update_dict})
    validation = service.validate_coupon(candidate)
    if not validation.valid:
        raise HTTPException(status_code=400, detail={"errors": validation.errors})

    try:
        return _to_response(service.update_coupon(coupon_id, update_dict))
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{coupon_id}/pause", response_model=CouponResponse)
async def pause_coupon(coupon_id: str, service: CouponService = Depends(get_coupon_service)):
    """Pause a coupon so it can no longer be applied."""
    try:
        return _to_response(service.set_status(coupon_id, "paused"))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{coupon_id}/activate", response_model=CouponResponse)
async def activate_coupon(coupon_id: str, service: CouponService = Depends(get_coupon_service)):
    """Re-activate a paused coupon."""
    try:
        return _to_response(service.set_status(coupon_id, "active"))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{coupon_id}")
async def delete_coupon(coupon_id: str, service: CouponService = Depends(get_coupon_service)):
    """Delete a coupon."""
    try:
        service.delete_coupon(coupon_id)
        return {"success": True, "message": f"Coupon '{coupon_id}' deleted"}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/validate", response_model=ValidationResponse)
async def validate_coupon(coupon_data: CouponCreate, service: CouponService = Depends(get_coupon_service)):
    """Validate a coupon without saving."""
    coupon = Coupon(**coupon_data.model_dump())
    result = service.validate_coupon(coupon)
    return ValidationResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)
