"""
Maintenance Endpoints - Periodic jobs and cleanup operations

Each job also runs in-process when SCHEDULER_ENABLED is set; these endpoints
let an external scheduler drive them instead.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.active_session_service import ActiveSessionService
from app.services.absence_sweep_service import AbsenceSweepService
from app.services.cleanup_service import CleanupService
from app.services.scan_service import ScanService
from app.services.pipeline import derivation_service
from app.schemas import RefreshResult, SweepReport, CleanupResult, ReplayRequest, ReplayResult, DataResponse
from app.api.deps import require_min_role_level
from app.core.config import settings
from atams.exceptions import InternalServerException

router = APIRouter()
active_session_service = ActiveSessionService()
absence_sweep_service = AbsenceSweepService()
cleanup_service = CleanupService()
scan_service = ScanService(derivation_service)


@router.post(
    "/refresh-active-sessions",
    response_model=DataResponse[RefreshResult],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def refresh_active_sessions(db: Session = Depends(get_db)):
    """
    Recompute the set of sessions live right now

    **Use case:**
    - Run every few minutes (ACTIVE_SESSION_REFRESH_MINUTES) so scans resolve to current sessions
    """
    projection = active_session_service.refresh(db)
    if projection is None:
        raise InternalServerException("Active session refresh failed; previous projection kept")

    result = RefreshResult(
        version=projection.version,
        refreshed_at=projection.refreshed_at,
        active_session_count=len(projection.entries()),
        sessions=projection.to_tree()
    )

    return DataResponse(
        success=True,
        message="Active sessions refreshed",
        data=result
    )


@router.post(
    "/sweep-absences",
    response_model=DataResponse[SweepReport],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def sweep_absences(db: Session = Depends(get_db)):
    """
    Mark absent every enrolled student without a valid check-in in today's finished sessions

    **Use case:**
    - Run once at the end of the day (ABSENCE_SWEEP_CRON)
    """
    report = absence_sweep_service.sweep(db)

    return DataResponse(
        success=True,
        message=f"Absence sweep completed, {report.marked_absent} records marked absent",
        data=report
    )


@router.post(
    "/replay-scans",
    response_model=DataResponse[ReplayResult],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def replay_scans(
    request: Optional[ReplayRequest] = None,
    db: Session = Depends(get_db)
):
    """
    Redeliver stored scans to the derivation engine

    Already applied scans are skipped, so replaying the same range twice is safe.
    """
    result = scan_service.replay(db, request)

    return DataResponse(
        success=True,
        message=f"Replayed {result.processed} scans",
        data=result
    )


@router.post(
    "/cleanup-scan-ledger",
    response_model=DataResponse[CleanupResult],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def cleanup_scan_ledger(
    days_old: Optional[int] = Query(None, ge=1, le=90, description="Delete ledger entries older than this many days"),
    db: Session = Depends(get_db)
):
    """
    Clean up old entries of the processed-scan ledger

    **Authorization:**
    - Requires role level >= 50 (Admin or above)

    **Parameters:**
    - days_old: defaults to SCAN_LEDGER_RETENTION_DAYS
    """
    days_old = days_old or settings.SCAN_LEDGER_RETENTION_DAYS
    deleted_count = cleanup_service.cleanup_scan_ledger(db, days_old=days_old)

    result = CleanupResult(
        deleted_count=deleted_count,
        message=f"Successfully deleted {deleted_count} ledger entries older than {days_old} days"
    )

    return DataResponse(
        success=True,
        message="Scan ledger cleanup completed",
        data=result
    )
