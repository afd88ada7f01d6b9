from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
import os
import logging
from campusconnect.attendance import router as attendance_router
from campusconnect.auth import router as auth_router
from campusconnect.auth.dependencies import GuardRedirect
from campusconnect.dashboards import router as dashboards_router
from campusconnect.fees import router as fees_router
from campusconnect.health import router as health_router
from campusconnect.noticeboard import router as noticeboard_router
from campusconnect.results import router as results_router
from campusconnect.students import router as students_router
from campusconnect.timetable import router as timetable_router
from campusconnect.storage.service import LOCAL_MOUNT_PATH
from campusconnect.config.settings import settings
from campusconnect.database import init_db
from mangum import Mangum

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)

# Prevent duplicate logs from uvicorn when running locally
if settings.APP_ENV != 'development':
    logging.getLogger("uvicorn.access").propagate = False
    logging.getLogger("uvicorn.error").propagate = False

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application."""
    logger.info(f"Creating FastAPI app - Environment: {settings.APP_ENV}")

    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
        docs_url=settings.API_DOCS_URL,
        redoc_url=settings.API_REDOC_URL,
        openapi_url=settings.API_OPENAPI_URL
    )

    @app.on_event("startup")
    async def startup_event():
        """Run initialization tasks on application startup"""
        logger.info("FastAPI application starting up...")
        init_db()
        logger.info("Application startup completed successfully")

    @app.exception_handler(GuardRedirect)
    async def guard_redirect_handler(request: Request, exc: GuardRedirect):
        return RedirectResponse(url=exc.location, status_code=303)

    frontend_url = os.getenv("FRONTEND_URL", "")

    allowed_origins = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    if frontend_url:
        allowed_origins.append(frontend_url.rstrip("/"))

    if os.getenv("ALLOW_ALL_ORIGINS", "false").lower() == "true":
        allowed_origins = ["*"]

    logger.info(f"CORS allowed origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router.router)
    app.include_router(dashboards_router.router)
    app.include_router(health_router.router)
    app.include_router(students_router.router)
    app.include_router(students_router.classes_router)
    app.include_router(attendance_router.router)
    app.include_router(attendance_router.student_router)
    app.include_router(results_router.router)
    app.include_router(results_router.student_router)
    app.include_router(timetable_router.router)
    app.include_router(timetable_router.student_router)
    app.include_router(noticeboard_router.router)
    app.include_router(noticeboard_router.student_router)
    app.include_router(fees_router.router)
    app.include_router(fees_router.student_router)

    if settings.STORAGE_MODE.lower() == "local":
        app.mount(
            LOCAL_MOUNT_PATH,
            StaticFiles(directory=settings.STORAGE_LOCAL_ROOT, check_dir=False),
            name="files",
        )

    logger.info("FastAPI app created successfully")
    return app


_fastapi_app = create_app()
app = _fastapi_app

# Lambda entry point
handler = Mangum(_fastapi_app)

if __name__ == '__main__':
    import uvicorn

    port = settings.PORT
    print(f"Starting FastAPI server on port {port}...")
    print(f"Environment: {settings.APP_ENV}")
    print(f"API Documentation: http://localhost:{port}{settings.API_DOCS_URL}")

    uvicorn.run(app,
                host="0.0.0.0",
                port=port,
                log_level="info",
                access_log=False)
