"""Text-generation proxy so the API key never reaches the client."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from excel_quiz import config
from excel_quiz.dependencies.auth import get_current_user
from excel_quiz.models.advice import AdviceRequest, AdviceResponse
from excel_quiz.models.db.user import User
from excel_quiz.services.gemini_client import GeminiClient, GeminiError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/advice", tags=["advice"])


def get_gemini_client() -> GeminiClient:
    if not config.GEMINI_API_KEY:
        raise HTTPException(status_code=503, detail="Advice service is not configured")
    return GeminiClient()


@router.post("", response_model=AdviceResponse)
async def generate_advice(
    data: AdviceRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    client: Annotated[GeminiClient, Depends(get_gemini_client)],
) -> AdviceResponse:
    """Forward a prompt to Gemini and return its text."""
    try:
        text = await client.generate(data.prompt)
    except GeminiError as e:
        logger.warning(f"Advice generation failed for user {current_user.id}: {e}")
        raise HTTPException(status_code=502, detail="Advice generation failed") from e
    finally:
        await client.aclose()
    return AdviceResponse(text=text)
