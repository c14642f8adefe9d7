"""Chapter catalog endpoints."""
from fastapi import APIRouter

from excel_quiz.models.chapters import ChapterResponse, ChapterSummaryResponse
from excel_quiz.quiz.catalog import chapter_to_payload
from excel_quiz.services.catalog_service import get_catalog, get_chapter_or_404

router = APIRouter(prefix="/api/chapters", tags=["chapters"])


@router.get("", response_model=list[ChapterSummaryResponse])
def list_chapters() -> list[dict[str, object]]:
    """List chapters in catalog order."""
    return [
        {
            "id": chapter.id,
            "title": chapter.title,
            "problemDescription": chapter.problem_description,
            "blankCount": chapter.blank_count,
        }
        for chapter in get_catalog()
    ]


@router.get("/{chapter_id}", response_model=ChapterResponse)
def get_chapter(chapter_id: int) -> dict[str, object]:
    """Get a full chapter including its answer key."""
    return chapter_to_payload(get_chapter_or_404(chapter_id))
