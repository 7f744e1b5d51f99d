from decimal import Decimal
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from haype.models.balance_ledger import LedgerAccount, LedgerField, LedgerRef


class LedgerEntryResponse(BaseModel):
    id: int
    account_type: LedgerAccount
    account_id: int
    field: LedgerField
    ref_type: LedgerRef
    ref_id: Optional[str] = None
    change: Decimal
    value_after: Decimal
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LedgerListResponse(BaseModel):
    total: int
    entries: List[LedgerEntryResponse]
