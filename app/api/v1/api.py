from fastapi import APIRouter
from app.api.v1.endpoints import scans, events, students, attendance, maintenance

api_router = APIRouter()

# Register routes
api_router.include_router(scans.router, prefix="/scans", tags=["Scans"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(maintenance.router, prefix="/maintenance", tags=["Maintenance"])
