"""Process-wide access to the chapter catalog."""
from functools import lru_cache

from fastapi import HTTPException

from excel_quiz import config
from excel_quiz.quiz.catalog import Catalog, Chapter, load_catalog


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """Load the catalog once; raises ConfigurationError if it is malformed."""
    return load_catalog(config.CHAPTERS_PATH)


def get_chapter_or_404(chapter_id: int) -> Chapter:
    chapter = get_catalog().get(chapter_id)
    if chapter is None:
        raise HTTPException(status_code=404, detail="Chapter not found")
    return chapter
