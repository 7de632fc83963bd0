"""
Attendance Endpoints - Derived records, session rosters and reports
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.attendance_service import AttendanceService
from app.services.active_session_service import ActiveSessionService
from app.schemas import AttendanceRecord, SessionRoster, WeeklyAnalysis, RefreshResult, DataResponse
from app.api.deps import require_auth, require_min_role_level
from app.core.config import settings
from atams.encryption import encrypt_response_data

router = APIRouter()
attendance_service = AttendanceService()
active_session_service = ActiveSessionService()


@router.get(
    "/active-sessions",
    response_model=DataResponse[RefreshResult],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def get_active_sessions(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Sessions currently accepting scans, as of the last materializer run

    Shape of `sessions`: `{eventId: {sessionId: {eventName, sessionDetails: {startTime, endTime}}}}`
    """
    projection = active_session_service.current(db)
    entries = projection.entries()

    response = DataResponse(
        success=True,
        message="Active sessions retrieved successfully",
        data=RefreshResult(
            version=projection.version,
            refreshed_at=projection.refreshed_at,
            active_session_count=len(entries),
            sessions=projection.to_tree()
        )
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/analysis/weekly",
    response_model=DataResponse[WeeklyAnalysis],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def get_weekly_analysis(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Attendance aggregated per weekday (index 0 = Sunday)

    **Authorization:**
    - Requires role level >= 50 (Admin or above)
    """
    analysis = attendance_service.get_weekly_analysis(db)

    response = DataResponse(
        success=True,
        message="Weekly analysis retrieved successfully",
        data=analysis
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/{ev_id}/{es_id}",
    response_model=DataResponse[SessionRoster],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def get_session_roster(
    ev_id: str,
    es_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Students of one session grouped into onTime, late and absent

    **Authorization:**
    - Requires role level >= 50 (Admin or above)
    """
    roster = attendance_service.get_session_roster(db, ev_id, es_id)

    response = DataResponse(
        success=True,
        message="Session roster retrieved successfully",
        data=roster
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/{ev_id}/{es_id}/{st_id}",
    response_model=DataResponse[AttendanceRecord],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def get_attendance_record(
    ev_id: str,
    es_id: str,
    st_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """Single attendance record of a student in a session"""
    record = attendance_service.get_record(db, ev_id, es_id, st_id)

    response = DataResponse(
        success=True,
        message="Attendance record retrieved successfully",
        data=record
    )

    return encrypt_response_data(response, settings)
