"""
Events Endpoints - CRUD operations for the event catalog
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.event_service import EventService
from app.schemas import Event, EventCreate, EventUpdate, DataResponse, PaginationResponse
from app.api.deps import require_auth, require_min_role_level
from app.core.config import settings
from atams.encryption import encrypt_response_data

router = APIRouter()
event_service = EventService()


@router.get(
    "/",
    response_model=PaginationResponse[Event],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def list_events(
    search: str = Query("", description="Search events by name or code"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Get list of events with their sessions

    **Authorization:**
    - Requires role level >= 1 (any authenticated user)
    """
    events = event_service.list_events(db, search=search, skip=skip, limit=limit)
    total = event_service.count_events(db, search=search)

    response = PaginationResponse(
        success=True,
        message="Events retrieved successfully",
        data=events,
        total=total,
        page=skip // limit + 1,
        size=limit,
        pages=(total + limit - 1) // limit
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/{ev_id}",
    response_model=DataResponse[Event],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def get_event(
    ev_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """Get single event by ID"""
    event = event_service.get_event(db, ev_id)

    response = DataResponse(
        success=True,
        message="Event retrieved successfully",
        data=event
    )

    return encrypt_response_data(response, settings)


@router.post(
    "/",
    response_model=DataResponse[Event],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_min_role_level(50))]
)
async def create_event(
    event: EventCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Create new event with its sessions

    **Authorization:**
    - Requires role level >= 50 (Admin or above)

    **Validation:**
    - ev_id: optional, generated when omitted, unique
    - sessions: each needs es_start_time < es_end_time; IDs become `{ev_id}-session-{index}`
    """
    new_event = event_service.create_event(db, event)

    response = DataResponse(
        success=True,
        message="Event created successfully",
        data=new_event
    )

    return encrypt_response_data(response, settings)


@router.put(
    "/{ev_id}",
    response_model=DataResponse[Event],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def update_event(
    ev_id: str,
    event: EventUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Update existing event

    **Authorization:**
    - Requires role level >= 50 (Admin or above)

    **Note:**
    - The session list can only be replaced while no attendance exists for the event (409 otherwise)
    """
    updated_event = event_service.update_event(db, ev_id, event)

    response = DataResponse(
        success=True,
        message="Event updated successfully",
        data=updated_event
    )

    return encrypt_response_data(response, settings)


@router.delete(
    "/{ev_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_min_role_level(50))]
)
async def delete_event(
    ev_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Delete event together with its sessions, enrollments and attendance

    **Authorization:**
    - Requires role level >= 50 (Admin or above)
    """
    event_service.delete_event(db, ev_id)

    # 204 returns no content
    return None
