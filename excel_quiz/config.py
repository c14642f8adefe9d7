"""Application configuration and constants."""
import os
from pathlib import Path


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


PACKAGE_DIR = Path(__file__).resolve().parent

# Content
CHAPTERS_PATH = Path(
    os.environ.get("CHAPTERS_PATH", PACKAGE_DIR / "content" / "chapters.json")
)

# Database
DB_DIR = Path(os.environ.get("DB_DIR", Path.cwd() / "data"))
DB_DIR.mkdir(parents=True, exist_ok=True)
DATABASE_URL = os.environ.get(
    "DATABASE_URL", f"sqlite:///{DB_DIR / 'excel_quiz.db'}"
)

# Authentication
SECRET_KEY = os.environ.get(
    "SECRET_KEY",
    "CHANGE_ME_IN_PRODUCTION_USE_openssl_rand_hex_32"
)
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = _parse_int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 60)
SESSION_EXTEND_MINUTES = _parse_int_env("SESSION_EXTEND_MINUTES", 60)
SESSION_CLEANUP_INTERVAL_SECONDS = _parse_int_env(
    "SESSION_CLEANUP_INTERVAL_SECONDS", 24 * 60 * 60
)

# Admins
# At least one admin must exist; this email is seeded on first start.
INITIAL_ADMIN_EMAIL = os.environ.get("INITIAL_ADMIN_EMAIL")
INITIAL_ADMIN_NAME = os.environ.get("INITIAL_ADMIN_NAME", "管理者")

# Gemini
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
# "ai_studio" (Generative Language API) or "vertex" (Vertex AI Express)
GEMINI_PROVIDER = os.environ.get("GEMINI_PROVIDER", "ai_studio")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_VERTEX_REGION = os.environ.get("GEMINI_VERTEX_REGION", "us-central1")
GEMINI_VERTEX_PROJECT = os.environ.get("GEMINI_VERTEX_PROJECT")
GEMINI_TIMEOUT_SECONDS = _parse_int_env("GEMINI_TIMEOUT_SECONDS", 30)

# Client
API_BASE_URL = os.environ.get("API_BASE_URL", "http://127.0.0.1:8000")
CLIENT_STATE_PATH = Path(
    os.environ.get("CLIENT_STATE_PATH", Path.cwd() / "data" / "client_state.json")
)
