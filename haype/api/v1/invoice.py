from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from haype.core.dependencies import get_db, get_current_active_user
from haype.models.user import User
from haype.services.invoice_service import (
    get_invoice_by_id,
    get_all_invoices,
    next_invoice_number,
    create_invoice,
    update_invoice,
    delete_invoice
)
from haype.schemas.invoice import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceResponse,
    InvoiceListResponse,
    NextNumberResponse
)
from haype.utils.sequence import DuplicateNumberError
from haype.logger_config import logger

router = APIRouter()


@router.get("", response_model=InvoiceListResponse)
def get_invoices(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    car_id: Optional[int] = Query(None),
    customer_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get invoices, newest first, with their lines.
    """
    try:
        invoices, total = get_all_invoices(
            db, skip=skip, limit=limit, car_id=car_id, customer_id=customer_id,
            start_date=start_date, end_date=end_date, search=search
        )
        return InvoiceListResponse(
            total=total,
            invoices=[InvoiceResponse.model_validate(inv) for inv in invoices]
        )
    except Exception as e:
        logger.error(f"Error fetching invoices: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch invoices"
        )


@router.get("/next-number", response_model=NextNumberResponse)
def get_next_invoice_number(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Preview of the number the next invoice will get."""
    return NextNumberResponse(next_number=next_invoice_number(db))


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    invoice = get_invoice_by_id(db, invoice_id)
    if not invoice:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invoice not found"
        )
    return InvoiceResponse.model_validate(invoice)


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice_route(
    invoice_data: InvoiceCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create an invoice and distribute it:
    - car balance += total, car left += total left
    - each credit line adds its total to that customer's balance
    """
    try:
        invoice = create_invoice(
            db=db,
            car_id=invoice_data.car_id,
            invoice_date=invoice_data.invoice_date,
            items=[line.model_dump() for line in invoice_data.items],
            invoice_no=invoice_data.invoice_no
        )
        logger.info(f"Invoice {invoice.invoice_no} created by {current_user.email}")
        return InvoiceResponse.model_validate(invoice)
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
        logger.error(f"Error creating invoice: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create invoice"
        )


@router.put("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice_route(
    invoice_id: int,
    invoice_data: InvoiceUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Edit an invoice. The stored version is reversed and the edited one is
    distributed again, so balances reflect only the current version.
    """
    try:
        fields = invoice_data.model_dump(exclude_unset=True)
        if invoice_data.items is not None:
            fields["items"] = [line.model_dump() for line in invoice_data.items]

        invoice = update_invoice(db, invoice_id, fields)
        if not invoice:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Invoice not found"
            )
        logger.info(f"Invoice {invoice.invoice_no} updated by {current_user.email}")
        return InvoiceResponse.model_validate(invoice)
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
        logger.error(f"Error updating invoice: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update invoice"
        )


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice_route(
    invoice_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Delete an invoice after reversing its distribution."""
    try:
        success = delete_invoice(db, invoice_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Invoice not found"
            )
        logger.info(f"Invoice {invoice_id} deleted by {current_user.email}")
        return None
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting invoice: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete invoice"
        )
