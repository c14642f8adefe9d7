"""Service layer for score history."""
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session as DBSession, joinedload

from excel_quiz.models.db.score import Score
from excel_quiz.models.db.user import User
from excel_quiz.utils.time_utils import ensure_utc


def create_score(
    db: DBSession,
    user: User,
    chapter_id: int,
    chapter_title: str,
    score: int,
    date,
    user_answers: dict[str, str],
    correct_answers: dict[str, str],
    question_segments: list[Any],
    choices: list[str],
) -> Score:
    """Insert a graded attempt for ``user``."""
    row = Score(
        user_id=user.id,
        full_name=user.full_name,
        chapter_id=chapter_id,
        chapter_title=chapter_title,
        score=score,
        date=ensure_utc(date),
    )
    row.user_answers = user_answers
    row.correct_answers = correct_answers
    row.question_segments = question_segments
    row.choices = choices

    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def get_score(db: DBSession, score_id: int) -> Score | None:
    """Get score by ID."""
    return db.get(Score, score_id)


def get_scores_by_user(
    db: DBSession,
    user_id: int,
    chapter_id: int | None = None,
    limit: int = 500,
    offset: int = 0,
) -> list[Score]:
    """
    Get scores for a user, newest first, optionally filtered by chapter.
    """
    query = select(Score).where(Score.user_id == user_id)

    if chapter_id is not None:
        query = query.where(Score.chapter_id == chapter_id)

    query = query.order_by(Score.date.desc(), Score.id.desc()).limit(limit).offset(offset)

    return list(db.execute(query).scalars().all())


def get_all_scores(db: DBSession, limit: int = 5000) -> list[Score]:
    """Get every score with its user loaded (admin dashboard)."""
    query = (
        select(Score)
        .options(joinedload(Score.user))
        .order_by(Score.date.asc(), Score.id.asc())
        .limit(limit)
    )
    return list(db.execute(query).scalars().all())


def delete_score(db: DBSession, score_id: int) -> bool:
    """Delete a single score."""
    row = db.get(Score, score_id)
    if not row:
        return False

    db.delete(row)
    db.commit()
    return True


def delete_scores_by_user(db: DBSession, user_id: int) -> int:
    """Delete every score of a user."""
    result = db.execute(delete(Score).where(Score.user_id == user_id))
    db.commit()
    return result.rowcount or 0


def score_to_row(score: Score) -> dict[str, Any]:
    """Serialize a score into the snake_case record shape."""
    return {
        "id": score.id,
        "user_id": str(score.user_id),
        "full_name": score.full_name,
        "chapter_id": score.chapter_id,
        "chapter_title": score.chapter_title,
        "score": score.score,
        "date": ensure_utc(score.date),
        "user_answers": score.user_answers,
        "correct_answers": score.correct_answers,
        "question_segments": score.question_segments,
        "choices": score.choices,
    }
