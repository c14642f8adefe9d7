"""Excel Quiz Grader: fill-in-the-blank Excel training quizzes with score history."""

__version__ = "0.3.0"
