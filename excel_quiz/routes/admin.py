"""Admin endpoints: admin directory and the all-users score dashboard."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session as DbSession

from excel_quiz.database import get_db
from excel_quiz.dependencies.auth import get_current_admin, get_current_user
from excel_quiz.models.admins import (
    AdminCreate,
    AdminResponse,
    AdminStatusResponse,
    AdminUpdate,
)
from excel_quiz.models.auth import MessageResponse
from excel_quiz.models.db.admin import AdminUser
from excel_quiz.models.db.user import User
from excel_quiz.models.scores import DeletedResponse, ScoreResponse
from excel_quiz.services import admin_service
from excel_quiz.services.score_service import delete_score, get_all_scores, score_to_row
from excel_quiz.utils.validation import require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/me", response_model=AdminStatusResponse)
async def admin_status(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> AdminStatusResponse:
    """Report whether the current user is an admin."""
    return AdminStatusResponse(is_admin=admin_service.is_admin(db, current_user))


@router.get("/admins", response_model=list[AdminResponse])
async def list_admins(
    _admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[DbSession, Depends(get_db)],
) -> list[AdminUser]:
    """List admins ordered by email."""
    return admin_service.list_admins(db)


@router.post("/admins", response_model=AdminResponse, status_code=status.HTTP_201_CREATED)
async def create_admin(
    data: AdminCreate,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[DbSession, Depends(get_db)],
) -> AdminUser:
    """Add an admin by email and display name."""
    display_name = require_text("display_name", data.display_name)
    try:
        created = admin_service.add_admin(db, data.email, display_name)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    logger.info(f"Admin {admin.id} added admin {created.email}")
    return created


@router.patch("/admins/{admin_id}", response_model=AdminResponse)
async def update_admin(
    admin_id: int,
    data: AdminUpdate,
    _admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[DbSession, Depends(get_db)],
) -> AdminUser:
    """Rename an admin."""
    display_name = require_text("display_name", data.display_name)
    try:
        return admin_service.rename_admin(db, admin_id, display_name)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.delete("/admins/{admin_id}", response_model=MessageResponse)
async def delete_admin(
    admin_id: int,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[DbSession, Depends(get_db)],
) -> MessageResponse:
    """Remove an admin. The last remaining admin cannot be removed."""
    try:
        admin_service.remove_admin(db, admin_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    logger.info(f"Admin {admin.id} removed admin {admin_id}")
    return MessageResponse(message="Admin deleted")


@router.get("/scores", response_model=list[ScoreResponse])
async def list_all_scores(
    _admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[DbSession, Depends(get_db)],
) -> list[dict[str, object]]:
    """List every user's scores, oldest first."""
    return [score_to_row(row) for row in get_all_scores(db)]


@router.delete("/scores/{score_id}", response_model=DeletedResponse)
async def delete_any_score(
    score_id: int,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[DbSession, Depends(get_db)],
) -> DeletedResponse:
    """Delete any user's score."""
    if not delete_score(db, score_id):
        raise HTTPException(status_code=404, detail="Score not found")
    logger.info(f"Admin {admin.id} deleted score {score_id}")
    return DeletedResponse(deleted=1)
