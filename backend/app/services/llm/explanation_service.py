import asyncio
import logging
import time
from typing import Optional, Sequence, Tuple

from pydantic import BaseModel, ValidationError, field_validator

from app.services.llm.prompt_builder import build_chat_prompt, build_report_prompt
from app.services.llm.text_generator import TextGenerator
from app.services.pharmacogenomics.models import GeneFinding
from app.services.pharmacogenomics.recommendation_engine import DrugRecommendation

logger = logging.getLogger(__name__)

DEFAULT_CLINICAL_INTERPRETATION = (
    "Based on processed PharmGKB and CPIC datasets, clinical actions are warranted "
    "for specific prodrugs or substances if relevant."
)

CHAT_FALLBACK_ANSWER = (
    "I'm sorry, I couldn't process that query right now. Please refer to the CPIC "
    "guidelines in the dashboard for confirmed clinical actions."
)


class ExplanationText(BaseModel):
    """The two prose fields of a report explanation."""
    biological_explanation: str
    clinical_interpretation: str

    @field_validator("biological_explanation", "clinical_interpretation")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


def build_template_explanation(high_risk: Sequence[GeneFinding]) -> ExplanationText:
    """Deterministic explanation naming the affected genes and the primary phenotype."""
    genes = ", ".join(f.gene for f in high_risk)
    primary_gene = high_risk[0].gene if high_risk else "primary"
    primary_phenotype = high_risk[0].phenotype if high_risk else "standard metabolizer"

    return ExplanationText(
        biological_explanation=(
            f"Found significant metabolic variations in the {genes} pathway(s). "
            f"Specifically, the {primary_gene} gene is behaving as a {primary_phenotype}."
        ),
        clinical_interpretation=DEFAULT_CLINICAL_INTERPRETATION,
    )


async def generate_explanation(
    high_risk: Sequence[GeneFinding],
    recommendations: Sequence[DrugRecommendation],
    generator: Optional[TextGenerator],
    *,
    timeout: float,
) -> Tuple[ExplanationText, bool]:
    """
    Report explanation, optionally paraphrased by an LLM.

    The generator is called at most once and only when high-risk genes exist.
    Its answer replaces the template wholesale only if both fields are present
    and non-blank. Timeouts, transport errors and malformed answers keep the
    template. Returns (explanation, llm_used).
    """
    template = build_template_explanation(high_risk)
    if generator is None or not high_risk:
        return template, False

    prompt = build_report_prompt(high_risk, recommendations)
    llm_start_time = time.time()

    try:
        data = await asyncio.wait_for(generator.generate_json(prompt, timeout=timeout), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("LLM explanation timed out after %.1fs, using template", timeout)
        return template, False
    except Exception as e:
        # Safety net: enrichment must never fail the report
        logger.warning("LLM explanation failed, using template: %s", e)
        return template, False

    if data is None:
        logger.warning("LLM fallback triggered: no usable response")
        return template, False

    try:
        explanation = ExplanationText.model_validate(data)
    except ValidationError as e:
        logger.warning("LLM response missing required fields, using template: %s", e.errors()[0]["loc"])
        return template, False

    logger.info("LLM explanation generated in %.2f seconds", time.time() - llm_start_time)
    return explanation, True


async def answer_question(
    question: str,
    generator: Optional[TextGenerator],
    *,
    timeout: float,
) -> str:
    """Clinical assistant answer, or a fixed fallback when the LLM is unavailable."""
    if generator is None:
        return CHAT_FALLBACK_ANSWER

    try:
        answer = await asyncio.wait_for(
            generator.generate_text(build_chat_prompt(question), timeout=timeout), timeout=timeout
        )
    except asyncio.TimeoutError:
        logger.warning("Chat request timed out after %.1fs", timeout)
        return CHAT_FALLBACK_ANSWER
    except Exception as e:
        logger.error("Ask PharmaGuard error: %s", e)
        return CHAT_FALLBACK_ANSWER

    return answer.strip() if answer and answer.strip() else CHAT_FALLBACK_ANSWER
