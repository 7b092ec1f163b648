"""
Rentals API - FastAPI router for rental plan management.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..services.rental_plan_service import RentalPlanService
from .state import AppState, get_state

router = APIRouter(prefix="/api/rentals", tags=["rentals"])


def get_rental_plan_service(state: AppState = Depends(get_state)) -> RentalPlanService:
    return state.rental_plan_service


class RentalPlanCreate(BaseModel):
    """Request model for creating a rental plan."""
    duration_days: int
    fee_percentage: float
    plan_id: Optional[str] = None


class RentalPlanResponse(BaseModel):
    plan_id: str
    duration_days: int
    fee_percentage: float


@router.get("", response_model=list[RentalPlanResponse])
async def list_plans(service: RentalPlanService = Depends(get_rental_plan_service)):
    """List plans, shortest first."""
    return [RentalPlanResponse(**p.__dict__) for p in service.list_plans()]


@router.post("", response_model=RentalPlanResponse)
async def create_plan(plan_data: RentalPlanCreate, service: RentalPlanService = Depends(get_rental_plan_service)):
    """Create a rental plan."""
    if plan_data.plan_id and service.get_plan(plan_data.plan_id):
        raise HTTPException(status_code=409, detail=f"Rental plan '{plan_data.plan_id}' already exists")
    try:
        plan = service.create_plan(plan_data.duration_days, plan_data.fee_percentage, plan_id=plan_data.plan_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return RentalPlanResponse(**plan.__dict__)


@router.delete("/{plan_id}")
async def delete_plan(plan_id: str, service: RentalPlanService = Depends(get_rental_plan_service)):
    """Delete a rental plan."""
    try:
        service.delete_plan(plan_id)
        return {"success": True, "message": f"Rental plan '{plan_id}' deleted"}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
