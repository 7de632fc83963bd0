"""
Scans Endpoints - Ingest from the card-scanner bridge and scan log browsing
"""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.scan_service import ScanService
from app.services.pipeline import derivation_service
from app.schemas import ScanRequest, ScanResult, ScanLog, DataResponse, PaginationResponse
from app.api.deps import require_auth, require_min_role_level, require_scanner_key
from app.core.config import settings
from app.utils.timestamps import to_utc_naive
from atams.encryption import encrypt_response_data

router = APIRouter()
scan_service = ScanService(derivation_service)


@router.post(
    "/",
    response_model=DataResponse[ScanResult],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_scanner_key)]
)
async def ingest_scan(
    request: ScanRequest,
    db: Session = Depends(get_db)
):
    """
    Record a badge scan and derive attendance from it

    **Authorization:**
    - `X-Scanner-Key` header must match the configured scanner key

    **Flow:**
    1. The raw scan is appended to the scan log (even when uid/timestamp are missing)
    2. Badge is resolved to a student, timestamp to a running session
    3. First scan in a session checks in, second checks out, later ones are ignored

    The `outcome` field tells what happened; non-recording outcomes are not errors,
    so the bridge must not retry them.
    """
    result = scan_service.ingest(db, request)

    return DataResponse(
        success=True,
        message=result.message or result.outcome,
        data=result
    )


@router.get(
    "/",
    response_model=PaginationResponse[ScanLog],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def list_scans(
    badge_id: Optional[str] = Query(None, description="Filter by badge number"),
    date_from: Optional[datetime] = Query(None, description="Scans at or after this instant"),
    date_to: Optional[datetime] = Query(None, description="Scans at or before this instant"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Browse the raw scan log, newest first

    **Authorization:**
    - Requires role level >= 50 (Admin or above)
    """
    date_from = to_utc_naive(date_from)
    date_to = to_utc_naive(date_to)
    scans = scan_service.list_scans(db, badge_id, date_from, date_to, skip, limit)
    total = scan_service.count_scans(db, badge_id, date_from, date_to)

    response = PaginationResponse(
        success=True,
        message="Scans retrieved successfully",
        data=scans,
        total=total,
        page=skip // limit + 1,
        size=limit,
        pages=(total + limit - 1) // limit
    )

    return encrypt_response_data(response, settings)
