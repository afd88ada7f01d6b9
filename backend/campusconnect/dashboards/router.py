from fastapi import APIRouter, Depends

from campusconnect.auth.dependencies import require_roles
from campusconnect.auth.session import Role, SessionContext
from campusconnect.dashboards.schemas import DashboardResponse

router = APIRouter(tags=["dashboards"])

# Each tile links to the API surface of one feature page.
TILES = {
    Role.ADMIN: [
        ("Add Student", "/api/admin/students"),
        ("Attendance", "/api/admin/attendance"),
        ("Results", "/api/admin/results"),
        ("Timetable", "/api/admin/timetable"),
        ("Noticeboard", "/api/admin/noticeboard"),
    ],
    Role.OFFICE: [
        ("Fees Management", "/api/office/fees"),
    ],
    Role.STUDENT: [
        ("Attendance", "/api/student/attendance"),
        ("Results", "/api/student/results"),
        ("Timetable", "/api/student/timetable"),
        ("Noticeboard", "/api/student/noticeboard"),
        ("Fees", "/api/student/fees"),
    ],
}

TITLES = {
    Role.ADMIN: "Admin Dashboard",
    Role.OFFICE: "Office Dashboard",
    Role.STUDENT: "Student Dashboard",
}


def dashboard_for(role: Role) -> dict:
    return {
        "role": role.value,
        "title": TITLES[role],
        "tiles": [{"label": label, "href": href} for label, href in TILES[role]],
    }


@router.get("/admin", response_model=DashboardResponse)
def admin_dashboard(session: SessionContext = Depends(require_roles(Role.ADMIN))):
    return dashboard_for(Role.ADMIN)


@router.get("/office", response_model=DashboardResponse)
def office_dashboard(session: SessionContext = Depends(require_roles(Role.OFFICE))):
    return dashboard_for(Role.OFFICE)


@router.get("/student", response_model=DashboardResponse)
def student_dashboard(session: SessionContext = Depends(require_roles(Role.STUDENT))):
    return dashboard_for(Role.STUDENT)
