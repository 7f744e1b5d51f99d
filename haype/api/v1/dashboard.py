from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from haype.core.dependencies import get_db, get_current_active_user
from haype.models.user import User
from haype.services.dashboard_service import get_dashboard
from haype.schemas.dashboard import DashboardCar, DashboardResponse, DashboardStats
from haype.logger_config import logger

router = APIRouter()


@router.get("", response_model=DashboardResponse)
def dashboard(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Active cars with balance/left and the headline totals."""
    try:
        data = get_dashboard(db)
        return DashboardResponse(
            cars=[DashboardCar.model_validate(car) for car in data["cars"]],
            stats=DashboardStats(**data["stats"])
        )
    except Exception as e:
        logger.error(f"Error building dashboard: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load dashboard"
        )
