"""
Students Endpoints - Roster management and event enrollment
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.student_service import StudentService
from app.schemas import Student, StudentCreate, StudentUpdate, DataResponse, PaginationResponse
from app.api.deps import require_auth, require_min_role_level
from app.core.config import settings
from atams.encryption import encrypt_response_data

router = APIRouter()
student_service = StudentService()


@router.get(
    "/",
    response_model=PaginationResponse[Student],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def list_students(
    search: str = Query("", description="Search by name or matric number"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Get list of students with pagination and search

    **Authorization:**
    - Requires role level >= 50 (Admin or above)
    """
    students = student_service.list_students(db, search=search, skip=skip, limit=limit)
    total = student_service.count_students(db)

    response = PaginationResponse(
        success=True,
        message="Students retrieved successfully",
        data=students,
        total=total,
        page=skip // limit + 1,
        size=limit,
        pages=(total + limit - 1) // limit
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/{st_id}",
    response_model=DataResponse[Student],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def get_student(
    st_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    student = student_service.get_student(db, st_id)

    response = DataResponse(
        success=True,
        message="Student retrieved successfully",
        data=student
    )

    return encrypt_response_data(response, settings)


@router.post(
    "/",
    response_model=DataResponse[Student],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_min_role_level(50))]
)
async def create_student(
    student: StudentCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Register a student

    **Validation:**
    - st_badge_id: required, unique across the roster (409 otherwise)
    """
    new_student = student_service.create_student(db, student)

    return DataResponse(
        success=True,
        message="Student created successfully",
        data=new_student
    )


@router.put(
    "/{st_id}",
    response_model=DataResponse[Student],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def update_student(
    st_id: str,
    student: StudentUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    updated_student = student_service.update_student(db, st_id, student)

    return DataResponse(
        success=True,
        message="Student updated successfully",
        data=updated_student
    )


@router.delete(
    "/{st_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_min_role_level(50))]
)
async def delete_student(
    st_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    student_service.delete_student(db, st_id)

    # 204 returns no content
    return None


@router.post(
    "/{st_id}/enrollments/{ev_id}",
    response_model=DataResponse[Student],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_min_role_level(50))]
)
async def enroll_student(
    st_id: str,
    ev_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Enroll student in an event

    **Note:**
    - One seat of the event quota is consumed while the quota is above zero
    """
    student = student_service.enroll(db, st_id, ev_id)

    return DataResponse(
        success=True,
        message="Student enrolled successfully",
        data=student
    )


@router.delete(
    "/{st_id}/enrollments/{ev_id}",
    response_model=DataResponse[Student],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def unenroll_student(
    st_id: str,
    ev_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    student = student_service.unenroll(db, st_id, ev_id)

    return DataResponse(
        success=True,
        message="Student unenrolled successfully",
        data=student
    )
