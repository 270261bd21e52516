import logging
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from em_diary.auth import NotAuthenticated, get_auth_session
from em_diary.config import MONGODB_DATABASE
from em_diary.dependencies import DiaryContext
from em_diary.logging_config import setup_logging
from em_diary.routes import auth_router, notes_router, team_router
from em_diary.store import MongoStore
from em_diary.template_config import STATIC_DIR, templates

logger = logging.getLogger(__name__)


def create_app(store: Optional[MongoStore] = None) -> FastAPI:
    """Build the app.

    Pass an already-attached ``store`` (tests do, with mongomock); otherwise
    the MongoDB connection is opened at startup.
    """
    setup_logging()

    app = FastAPI(
        title="EM Diary",
        description="Team members and one-on-one notes",
        version="1.0.0"
    )

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    app.include_router(auth_router)
    app.include_router(team_router)
    app.include_router(notes_router)

    if store is not None:
        app.state.diary = DiaryContext.from_store(store)

    @app.on_event("startup")
    def on_startup():
        """Connect to MongoDB and build the shared roster.

        If the database cannot be reached the app fails to start with a
        clear error.
        """
        if getattr(app.state, "diary", None) is not None:
            return
        mongo = MongoStore()
        try:
            mongo.connect()
        except Exception as e:
            raise RuntimeError(
                f"Database connection failed for MONGODB_DATABASE={MONGODB_DATABASE}: {e}"
            ) from e
        app.state.diary = DiaryContext.from_store(mongo)

    @app.on_event("shutdown")
    def on_shutdown():
        diary = getattr(app.state, "diary", None)
        if diary is not None:
            diary.store.disconnect()

    @app.get("/healthz")
    async def healthz(request: Request):
        diary = request.app.state.diary
        return {
            "status": "ok",
            "database": "up" if diary.store.health_check() else "down",
        }

    # Error handlers
    @app.exception_handler(NotAuthenticated)
    async def not_authenticated_handler(request: Request, exc: NotAuthenticated):
        """Signed-out requests go to the sign-in page and come back after."""
        return RedirectResponse(
            url=f"/login?next={quote(exc.next_url, safe='/')}", status_code=303
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Render 404 and 5xx errors as pages."""
        template = "errors/404.html" if exc.status_code == 404 else "errors/500.html"
        return templates.TemplateResponse(
            request,
            template,
            {"session": get_auth_session(request), "detail": exc.detail},
            status_code=exc.status_code,
        )

    @app.exception_handler(500)
    async def server_error_handler(request: Request, exc):
        """Handle 500 errors."""
        logger.exception("Unhandled error on %s", request.url.path)
        return templates.TemplateResponse(
            request,
            "errors/500.html",
            {"session": get_auth_session(request), "detail": None},
            status_code=500
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("em_diary.main:app", host="0.0.0.0", port=8000, reload=True)
