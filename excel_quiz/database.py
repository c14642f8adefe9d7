"""Database utilities and setup."""
import logging

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from excel_quiz.config import DATABASE_URL, INITIAL_ADMIN_EMAIL, INITIAL_ADMIN_NAME

logger = logging.getLogger(__name__)

# Create engine
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Base class for models
class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def seed_initial_admin(db, email: str | None, display_name: str | None = None) -> bool:
    """Insert the bootstrap admin when the admins table is empty."""
    from excel_quiz.models.db.admin import AdminUser

    if not email:
        return False
    count = db.execute(select(func.count(AdminUser.id))).scalar() or 0
    if count:
        return False
    db.add(AdminUser(email=email.strip().lower(), display_name=display_name))
    db.commit()
    logger.info(f"Seeded initial admin {email}")
    return True


def init_db():
    """Initialize database (create all tables, seed the first admin)."""
    # Register models on Base.metadata
    import excel_quiz.models.db  # noqa: F401

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_initial_admin(db, INITIAL_ADMIN_EMAIL, INITIAL_ADMIN_NAME)
    finally:
        db.close()
