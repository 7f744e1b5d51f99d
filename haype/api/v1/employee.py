from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from haype.core.dependencies import get_db, get_current_active_user
from haype.models.balance_ledger import LedgerAccount
from haype.models.common import RecordStatus
from haype.models.employee import EmployeeCategory
from haype.models.payment import PaymentKind
from haype.models.user import User
from haype.services.employee_service import (
    get_employee_by_id,
    get_all_employees,
    create_employee,
    update_employee,
    delete_employee
)
from haype.services.ledger import LedgerService
from haype.services.payment_service import PaymentService
from haype.schemas.employee import (
    EmployeeCreate,
    EmployeeUpdate,
    EmployeeResponse,
    EmployeeListResponse,
    EmployeeBalanceChange,
    EmployeeBalanceResponse
)
from haype.schemas.payment import PaymentResponse
from haype.schemas.balance_ledger import LedgerEntryResponse, LedgerListResponse
from haype.logger_config import logger

router = APIRouter()


@router.get("", response_model=EmployeeListResponse)
def get_employees(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None),
    category: Optional[EmployeeCategory] = Query(None),
    status_filter: Optional[RecordStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get all employees, newest first.
    """
    try:
        employees, total = get_all_employees(
            db, skip=skip, limit=limit, search=search, category=category, status=status_filter
        )
        return EmployeeListResponse(
            total=total,
            employees=[EmployeeResponse.model_validate(e) for e in employees]
        )
    except Exception as e:
        logger.error(f"Error fetching employees: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch employees"
        )


@router.get("/{employee_id}", response_model=EmployeeResponse)
def get_employee(
    employee_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    employee = get_employee_by_id(db, employee_id)
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found"
        )
    return EmployeeResponse.model_validate(employee)


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def create_employee_route(
    employee_data: EmployeeCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        employee = create_employee(
            db=db,
            name=employee_data.name,
            phone=employee_data.phone,
            category=employee_data.category,
            balance=employee_data.balance
        )
        logger.info(f"Employee {employee.id} created by {current_user.email}")
        return EmployeeResponse.model_validate(employee)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating employee: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create employee"
        )


@router.put("/{employee_id}", response_model=EmployeeResponse)
def update_employee_route(
    employee_id: int,
    employee_data: EmployeeUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        employee = update_employee(db, employee_id, **employee_data.model_dump(exclude_unset=True))
        if not employee:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Employee not found"
            )
        logger.info(f"Employee {employee_id} updated by {current_user.email}")
        return EmployeeResponse.model_validate(employee)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error updating employee: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update employee"
        )


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee_route(
    employee_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        success = delete_employee(db, employee_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Employee not found"
            )
        logger.info(f"Employee {employee_id} deleted by {current_user.email}")
        return None
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting employee: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete employee"
        )


def _change_balance(db: Session, employee_id: int, kind: PaymentKind, data: EmployeeBalanceChange, verb: str):
    try:
        payment = PaymentService(db).change_employee_balance(
            employee_id=employee_id,
            kind=kind,
            amount=data.amount,
            entry_date=data.date,
            description=data.description
        )
        if not payment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Employee not found"
            )
        return EmployeeBalanceResponse(
            message=f"Balance {verb} successfully",
            payment_no=payment.payment_no,
            new_balance=payment.balance_after
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error changing employee balance: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update employee balance"
        )


@router.post("/{employee_id}/add-balance", response_model=EmployeeBalanceResponse)
def add_balance(
    employee_id: int,
    data: EmployeeBalanceChange,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Increase what the company owes the employee."""
    return _change_balance(db, employee_id, PaymentKind.balance_add, data, "added")


@router.post("/{employee_id}/deduct-balance", response_model=EmployeeBalanceResponse)
def deduct_balance(
    employee_id: int,
    data: EmployeeBalanceChange,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Decrease what the company owes the employee. The balance cannot go below zero."""
    return _change_balance(db, employee_id, PaymentKind.balance_deduct, data, "deducted")


@router.get("/{employee_id}/payment-history", response_model=List[PaymentResponse])
def payment_history(
    employee_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    payments = PaymentService(db).employee_payment_history(employee_id)
    if payments is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found"
        )
    return [PaymentResponse.model_validate(p) for p in payments]


@router.get("/{employee_id}/ledger", response_model=LedgerListResponse)
def employee_ledger(
    employee_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Balance audit trail of one employee."""
    if not get_employee_by_id(db, employee_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found"
        )
    entries, total = LedgerService(db).history(LedgerAccount.employee, employee_id, skip=skip, limit=limit)
    return LedgerListResponse(total=total, entries=[LedgerEntryResponse.model_validate(e) for e in entries])
