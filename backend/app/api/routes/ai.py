from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.dependencies import get_app_config, get_text_generator
from app.services.llm.explanation_service import answer_question
from app.services.llm.text_generator import TextGenerator
from app.services.pharmacogenomics.config import PharmaGuardConfig

router = APIRouter()


class AskRequest(BaseModel):
    question: str


@router.post("/ask")
async def ask_pharmaguard(
    req: AskRequest,
    generator: Optional[TextGenerator] = Depends(get_text_generator),
    config: PharmaGuardConfig = Depends(get_app_config),
):
    """Clinical AI assistant; answers with a fixed fallback when the LLM is unavailable."""
    answer = await answer_question(req.question, generator, timeout=config.llm.chat_timeout_seconds)
    return {"answer": answer}
