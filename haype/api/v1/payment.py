from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from haype.core.dependencies import get_db, get_current_active_user
from haype.models.payment import PaymentKind
from haype.models.user import User
from haype.services.payment_service import PaymentService
from haype.schemas.invoice import NextNumberResponse
from haype.schemas.payment import (
    PaymentReceiveCreate,
    PaymentOutCreate,
    PaymentUpdate,
    PaymentResponse,
    PaymentListResponse
)
from haype.utils.sequence import DuplicateNumberError
from haype.logger_config import logger

router = APIRouter()


@router.get("", response_model=PaymentListResponse)
def get_payments(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    payment_type: Optional[PaymentKind] = Query(None, alias="type"),
    customer_id: Optional[int] = Query(None),
    car_id: Optional[int] = Query(None),
    employee_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get payments, newest first, with the total amount of the filtered set.
    """
    try:
        result = PaymentService(db).list_payments(
            skip=skip, limit=limit, payment_type=payment_type, customer_id=customer_id,
            car_id=car_id, employee_id=employee_id, start_date=start_date, end_date=end_date
        )
        return PaymentListResponse(
            total=result["total"],
            total_amount=result["total_amount"],
            payments=[PaymentResponse.model_validate(p) for p in result["payments"]]
        )
    except Exception as e:
        logger.error(f"Error fetching payments: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch payments"
        )


@router.get("/next-number", response_model=NextNumberResponse)
def get_next_payment_number(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Preview of the number the next payment will get."""
    return NextNumberResponse(next_number=PaymentService(db).next_payment_number())


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    payment = PaymentService(db).get_payment(payment_id)
    if not payment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )
    return PaymentResponse.model_validate(payment)


@router.post("/receive", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def receive_payment(
    payment_data: PaymentReceiveCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Money received from a customer. The customer's outstanding balance is
    reduced; an amount above that balance is rejected.
    """
    try:
        payment = PaymentService(db).create_receive(
            customer_id=payment_data.customer_id,
            amount=payment_data.amount,
            payment_date=payment_data.payment_date,
            description=payment_data.description,
            payment_no=payment_data.payment_no
        )
        logger.info(f"Payment {payment.payment_no} received by {current_user.email}")
        return PaymentResponse.model_validate(payment)
    except DuplicateNumberError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error receiving payment: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record payment"
        )


@router.post("/payment-out", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def payment_out(
    payment_data: PaymentOutCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Expense paid against a car (car left goes up) or an employee
    (employee balance goes down).
    """
    try:
        payment = PaymentService(db).create_payment_out(
            account_type=payment_data.account_type.value,
            recipient_id=payment_data.recipient_id,
            amount=payment_data.amount,
            payment_date=payment_data.payment_date,
            category=payment_data.category,
            description=payment_data.description,
            account_month=payment_data.account_month,
            payment_no=payment_data.payment_no
        )
        logger.info(f"Payment {payment.payment_no} paid out by {current_user.email}")
        return PaymentResponse.model_validate(payment)
    except DuplicateNumberError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error paying out: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record payment"
        )


@router.put("/{payment_id}", response_model=PaymentResponse)
def update_payment_route(
    payment_id: int,
    payment_data: PaymentUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Edit a payment. Only the difference between the new and the original
    amount is applied to the counterpart, which cannot be changed.
    """
    try:
        payment = PaymentService(db).update_payment(payment_id, payment_data.model_dump(exclude_unset=True))
        if not payment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Payment not found"
            )
        logger.info(f"Payment {payment.payment_no} updated by {current_user.email}")
        return PaymentResponse.model_validate(payment)
    except HTTPException:
        raise
    except DuplicateNumberError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error updating payment: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update payment"
        )


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment_route(
    payment_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Delete a payment after reversing its effect according to its type."""
    try:
        success = PaymentService(db).delete_payment(payment_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Payment not found"
            )
        logger.info(f"Payment {payment_id} deleted by {current_user.email}")
        return None
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting payment: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete payment"
        )
