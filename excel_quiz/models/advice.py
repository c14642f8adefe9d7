"""Advice proxy Pydantic models."""
from pydantic import BaseModel, Field


class AdviceRequest(BaseModel):
    """Prompt forwarded to the text-generation model."""

    prompt: str = Field(..., min_length=1, max_length=20000)


class AdviceResponse(BaseModel):
    """Generated text."""

    text: str
