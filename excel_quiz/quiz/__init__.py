"""Quiz domain: chapter catalog, grading, input assist and history helpers."""
from excel_quiz.quiz.catalog import BlankRef, Catalog, Chapter, load_catalog
from excel_quiz.quiz.grader import blank_results, empty_answers, grade, is_complete
from excel_quiz.quiz.input_assist import INPUT_ASSIST_RULES, apply_answer
from excel_quiz.quiz.scores import ScoreEntry

__all__ = [
    "BlankRef",
    "Catalog",
    "Chapter",
    "load_catalog",
    "blank_results",
    "empty_answers",
    "grade",
    "is_complete",
    "INPUT_ASSIST_RULES",
    "apply_answer",
    "ScoreEntry",
]
