from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from haype.logger_config import logger
from haype.models.invoice import InvoiceLine
from haype.models.item import Item


def get_item_by_id(db: Session, item_id: int) -> Optional[Item]:
    return db.query(Item).filter(Item.id == item_id).first()


def get_all_items(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
) -> tuple[List[Item], int]:
    query = db.query(Item)
    if search:
        query = query.filter(Item.name.ilike(f"%{search}%"))

    total = query.count()
    items = query.order_by(Item.created_at.desc(), Item.id.desc()).offset(skip).limit(limit).all()
    return items, total


def create_item(db: Session, **fields) -> Item:
    item = Item(**fields)
    db.add(item)
    try:
        db.commit()
        db.refresh(item)
        return item
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating item: {str(e)}")
        raise ValueError("Failed to create item.")


def update_item(db: Session, item_id: int, **fields) -> Optional[Item]:
    item = get_item_by_id(db, item_id)
    if not item:
        return None

    for key, value in fields.items():
        if value is not None:
            setattr(item, key, value)

    try:
        db.commit()
        db.refresh(item)
        return item
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating item: {str(e)}")
        raise ValueError("Failed to update item.")


def delete_item(db: Session, item_id: int) -> bool:
    item = get_item_by_id(db, item_id)
    if not item:
        return False

    if db.query(InvoiceLine).filter(InvoiceLine.item_id == item_id).first():
        raise ValueError("Item appears on invoices and cannot be deleted")

    db.delete(item)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting item: {str(e)}")
        raise ValueError("Failed to delete item.")
