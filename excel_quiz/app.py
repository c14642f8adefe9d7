"""FastAPI application: identity, score store, admin directory and advice proxy."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from excel_quiz import __version__
from excel_quiz.database import init_db
from excel_quiz.logging_setup import setup_console_logging
from excel_quiz.routes import admin, advice, auth, chapters, scores, users
from excel_quiz.services.catalog_service import get_catalog
from excel_quiz.services.cleanup_service import schedule_sessions_cleanup

setup_console_logging()

app = FastAPI(title="Excel Quiz API", version=__version__)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_events() -> None:
    """Validate the catalog, initialize the database and schedule cleanup."""
    get_catalog()
    init_db()
    schedule_sessions_cleanup()


@app.get("/api/health")
def health() -> dict[str, object]:
    return {"status": "ok", "chapters": len(get_catalog())}


# Include routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(chapters.router)
app.include_router(scores.router)
app.include_router(admin.router)
app.include_router(advice.router)
