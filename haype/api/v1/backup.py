from datetime import datetime
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from haype.core.dependencies import get_db, get_current_active_user, require_admin
from haype.models.user import User
from haype.services.backup_service import export_bundle, import_bundle
from haype.services.backup_workbook import build_workbook, read_workbook
from haype.schemas.backup import BackupBundle, ImportResponse
from haype.logger_config import logger

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _restore(db: Session, bundle: BackupBundle, user: User) -> ImportResponse:
    try:
        results = import_bundle(db, bundle)
        logger.info(f"Backup restored by {user.email}")
        return ImportResponse(
            message="System restored from backup",
            import_results=results,
            total_records=sum(results.values())
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error restoring backup: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to restore backup"
        )


@router.get("/export", response_model=BackupBundle)
def export_json(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """All business data as one JSON document."""
    try:
        bundle = export_bundle(db)
        logger.info(f"Backup exported by {current_user.email}")
        return bundle
    except Exception as e:
        logger.error(f"Error exporting backup: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export backup"
        )


@router.post("/import", response_model=ImportResponse)
def import_json(
    bundle: BackupBundle,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Replace ALL cars, employees, items, customers, invoices and payments
    with the bundle. Administrators only.
    """
    return _restore(db, bundle, current_user)


@router.get("/export.xlsx")
def export_workbook(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """The full backup as an Excel workbook download."""
    try:
        content = build_workbook(export_bundle(db))
    except Exception as e:
        logger.error(f"Error exporting backup workbook: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export backup"
        )

    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    filename = f"Haype_System_Backup_{timestamp}.xlsx"
    logger.info(f"Backup workbook {filename} exported by {current_user.email}")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/import.xlsx", response_model=ImportResponse)
def import_workbook(
    file: UploadFile = File(...),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Restore from a workbook produced by /backup/export.xlsx. Administrators only."""
    if not (file.filename or "").lower().endswith(".xlsx"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please select an Excel (.xlsx) file"
        )

    data = file.file.read()
    try:
        bundle = read_workbook(data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return _restore(db, bundle, current_user)
