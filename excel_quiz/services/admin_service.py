"""Admin directory service."""

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DbSession

from excel_quiz.models.db.admin import AdminUser
from excel_quiz.models.db.user import User
from excel_quiz.utils.validation import normalize_email


def is_admin(db: DbSession, user: User) -> bool:
    """Check whether the user's email is in the admin directory."""
    stmt = select(AdminUser.id).where(AdminUser.email == normalize_email(user.email))
    return db.execute(stmt).first() is not None


def list_admins(db: DbSession) -> list[AdminUser]:
    """List admins ordered by email."""
    stmt = select(AdminUser).order_by(AdminUser.email)
    return list(db.execute(stmt).scalars().all())


def count_admins(db: DbSession) -> int:
    return db.execute(select(func.count(AdminUser.id))).scalar() or 0


def add_admin(db: DbSession, email: str, display_name: str) -> AdminUser:
    """Add an admin.

    Raises:
        ValueError: if the email is already registered.
    """
    admin = AdminUser(email=normalize_email(email), display_name=display_name.strip())
    db.add(admin)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValueError("Admin already exists") from e
    db.refresh(admin)
    return admin


def rename_admin(db: DbSession, admin_id: int, display_name: str) -> AdminUser:
    """Update an admin's display name (last write wins)."""
    admin = db.get(AdminUser, admin_id)
    if not admin:
        raise LookupError("Admin not found")

    admin.display_name = display_name.strip()
    db.commit()
    db.refresh(admin)
    return admin


def remove_admin(db: DbSession, admin_id: int) -> None:
    """Delete an admin, refusing to empty the directory.

    Raises:
        LookupError: if the admin does not exist.
        ValueError: if it is the last admin.
    """
    admin = db.get(AdminUser, admin_id)
    if not admin:
        raise LookupError("Admin not found")
    if count_admins(db) <= 1:
        raise ValueError("Cannot delete the last admin")

    db.delete(admin)
    db.commit()
