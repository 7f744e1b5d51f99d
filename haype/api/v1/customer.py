from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from haype.core.dependencies import get_db, get_current_active_user
from haype.models.balance_ledger import LedgerAccount
from haype.models.common import RecordStatus
from haype.models.user import User
from haype.services.customer_service import (
    get_customer_by_id,
    get_all_customers,
    create_customer,
    update_customer,
    delete_customer
)
from haype.services.ledger import LedgerService
from haype.schemas.customer import CustomerCreate, CustomerUpdate, CustomerResponse, CustomerListResponse
from haype.schemas.balance_ledger import LedgerEntryResponse, LedgerListResponse
from haype.logger_config import logger

router = APIRouter()


@router.get("", response_model=CustomerListResponse)
def get_customers(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None),
    status_filter: Optional[RecordStatus] = Query(None, alias="status"),
    with_balance: bool = Query(False, description="Only customers with an outstanding balance"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get all customers with optional search filtering.
    Requires authentication.
    """
    try:
        customers, total = get_all_customers(
            db, skip=skip, limit=limit, search=search, status=status_filter, with_balance=with_balance
        )
        return CustomerListResponse(
            total=total,
            customers=[CustomerResponse.model_validate(c) for c in customers]
        )
    except Exception as e:
        logger.error(f"Error fetching customers: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch customers"
        )


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    return CustomerResponse.model_validate(customer)


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer_route(
    customer_data: CustomerCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        customer = create_customer(
            db=db,
            name=customer_data.name,
            phone=customer_data.phone,
            balance=customer_data.balance
        )
        logger.info(f"Customer {customer.id} created by {current_user.email}")
        return CustomerResponse.model_validate(customer)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating customer: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create customer"
        )


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer_route(
    customer_id: int,
    customer_data: CustomerUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        customer = update_customer(
            db=db,
            customer_id=customer_id,
            name=customer_data.name,
            phone=customer_data.phone,
            status=customer_data.status,
            balance=customer_data.balance
        )
        if not customer:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Customer not found"
            )
        logger.info(f"Customer {customer_id} updated by {current_user.email}")
        return CustomerResponse.model_validate(customer)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error updating customer: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update customer"
        )


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer_route(
    customer_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        success = delete_customer(db, customer_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Customer not found"
            )
        logger.info(f"Customer {customer_id} deleted by {current_user.email}")
        return None
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting customer: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete customer"
        )


@router.get("/{customer_id}/ledger", response_model=LedgerListResponse)
def customer_ledger(
    customer_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Outstanding-balance audit trail of one customer."""
    if not get_customer_by_id(db, customer_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    entries, total = LedgerService(db).history(LedgerAccount.customer, customer_id, skip=skip, limit=limit)
    return LedgerListResponse(total=total, entries=[LedgerEntryResponse.model_validate(e) for e in entries])
