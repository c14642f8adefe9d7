"""Score record endpoints for the signed-in user."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session as DbSession

from excel_quiz.database import get_db
from excel_quiz.dependencies.auth import get_current_user
from excel_quiz.models.db.user import User
from excel_quiz.models.scores import DeletedResponse, ScoreCreate, ScoreResponse
from excel_quiz.services.score_service import (
    create_score,
    delete_score,
    delete_scores_by_user,
    get_score,
    get_scores_by_user,
    score_to_row,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/scores", tags=["scores"])


@router.post("", response_model=ScoreResponse, status_code=status.HTTP_201_CREATED)
async def post_score(
    data: ScoreCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Store a graded attempt. The author name is taken from the profile."""
    row = create_score(
        db,
        current_user,
        chapter_id=data.chapter_id,
        chapter_title=data.chapter_title,
        score=data.score,
        date=data.date,
        user_answers=data.user_answers,
        correct_answers=data.correct_answers,
        question_segments=[
            segment if isinstance(segment, str) else segment.model_dump()
            for segment in data.question_segments
        ],
        choices=data.choices,
    )
    logger.info(
        f"User {current_user.id} scored {row.score} on chapter {row.chapter_id}"
    )
    return score_to_row(row)


@router.get("/me", response_model=list[ScoreResponse])
async def list_my_scores(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
    chapter_id: int | None = None,
    limit: int = Query(500, ge=1, le=5000),
    offset: int = Query(0, ge=0),
) -> list[dict[str, object]]:
    """List the current user's scores, newest first."""
    rows = get_scores_by_user(db, current_user.id, chapter_id, limit, offset)
    return [score_to_row(row) for row in rows]


@router.delete("/me", response_model=DeletedResponse)
async def clear_my_scores(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> DeletedResponse:
    """Delete every score of the current user."""
    deleted = delete_scores_by_user(db, current_user.id)
    logger.info(f"User {current_user.id} cleared {deleted} scores")
    return DeletedResponse(deleted=deleted)


@router.delete("/{score_id}", response_model=DeletedResponse)
async def delete_my_score(
    score_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> DeletedResponse:
    """Delete one of the current user's scores."""
    row = get_score(db, score_id)
    if row is None or row.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="Score not found")
    return DeletedResponse(deleted=int(delete_score(db, score_id)))
