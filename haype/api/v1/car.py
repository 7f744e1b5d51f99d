from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from haype.core.dependencies import get_db, get_current_active_user
from haype.models.balance_ledger import LedgerAccount
from haype.models.car import CarStatus
from haype.models.user import User
from haype.services.car_service import (
    get_car_by_id,
    get_all_cars,
    create_car,
    update_car,
    delete_car
)
from haype.services.ledger import LedgerService
from haype.schemas.car import CarCreate, CarUpdate, CarResponse, CarListResponse
from haype.schemas.balance_ledger import LedgerEntryResponse, LedgerListResponse
from haype.logger_config import logger

router = APIRouter()


@router.get("", response_model=CarListResponse)
def get_cars(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None),
    status_filter: Optional[CarStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get all cars with their driver and kirishboy.
    Requires authentication.
    """
    try:
        cars, total = get_all_cars(db, skip=skip, limit=limit, search=search, status=status_filter)
        return CarListResponse(total=total, cars=[CarResponse.model_validate(car) for car in cars])
    except Exception as e:
        logger.error(f"Error fetching cars: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch cars"
        )


@router.get("/{car_id}", response_model=CarResponse)
def get_car(
    car_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    car = get_car_by_id(db, car_id)
    if not car:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Car not found"
        )
    return CarResponse.model_validate(car)


@router.post("", response_model=CarResponse, status_code=status.HTTP_201_CREATED)
def create_car_route(
    car_data: CarCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create a car. Driver and kirishboy must be employees of that category.
    """
    try:
        car = create_car(
            db=db,
            name=car_data.name,
            number_plate=car_data.number_plate,
            driver_id=car_data.driver_id,
            kirishboy_id=car_data.kirishboy_id,
            balance=car_data.balance,
            left=car_data.left
        )
        logger.info(f"Car {car.number_plate} created by {current_user.email}")
        return CarResponse.model_validate(car)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating car: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create car"
        )


@router.put("/{car_id}", response_model=CarResponse)
def update_car_route(
    car_id: int,
    car_data: CarUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Partial update. Sending driver_id or kirishboy_id as null unassigns them;
    balance and left are manual corrections recorded in the ledger.
    """
    try:
        car = update_car(db, car_id, car_data.model_dump(exclude_unset=True))
        if not car:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Car not found"
            )
        logger.info(f"Car {car_id} updated by {current_user.email}")
        return CarResponse.model_validate(car)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error updating car: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update car"
        )


@router.delete("/{car_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_car_route(
    car_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        success = delete_car(db, car_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Car not found"
            )
        logger.info(f"Car {car_id} deleted by {current_user.email}")
        return None
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting car: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete car"
        )


@router.get("/{car_id}/ledger", response_model=LedgerListResponse)
def car_ledger(
    car_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Balance and left audit trail of one car."""
    if not get_car_by_id(db, car_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Car not found"
        )
    entries, total = LedgerService(db).history(LedgerAccount.car, car_id, skip=skip, limit=limit)
    return LedgerListResponse(total=total, entries=[LedgerEntryResponse.model_validate(e) for e in entries])
