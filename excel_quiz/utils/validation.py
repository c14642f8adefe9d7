"""Validation utilities."""
from fastapi import HTTPException


def require_text(name: str, value: str | None) -> str:
    """Strip value and reject empty strings."""
    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{name} is required")
    cleaned = value.strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail=f"{name} is required")
    return cleaned


def normalize_email(value: str) -> str:
    """Lower-case and strip an email address."""
    return value.strip().lower()
