"""
Tests for template explanations and LLM paraphrase fallbacks.
"""

import pytest

from app.services.llm.explanation_service import (
    CHAT_FALLBACK_ANSWER,
    DEFAULT_CLINICAL_INTERPRETATION,
    answer_question,
    build_template_explanation,
    generate_explanation,
)
from app.services.pharmacogenomics.phenotype_mapper import resolve_gene_findings
from app.services.pharmacogenomics.risk_scoring import high_risk_findings


@pytest.fixture
def high_risk():
    return high_risk_findings(resolve_gene_findings({"rs3892097": "1/1"}))


class TestTemplateExplanation:

    def test_names_genes_and_primary_phenotype(self, high_risk):
        text = build_template_explanation(high_risk)
        assert "CYP2D6 pathway(s)" in text.biological_explanation
        assert "behaving as a Poor Metabolizer" in text.biological_explanation
        assert text.clinical_interpretation == DEFAULT_CLINICAL_INTERPRETATION

    def test_no_high_risk(self):
        text = build_template_explanation([])
        assert "the primary gene is behaving as a standard metabolizer" in text.biological_explanation


class TestGenerateExplanation:

    @pytest.mark.asyncio
    async def test_no_generator(self, high_risk):
        text, used = await generate_explanation(high_risk, [], None, timeout=1.0)
        assert used is False
        assert text == build_template_explanation(high_risk)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("answer", [
        None,
        {},
        {"biological_explanation": "only one field"},
        {"biological_explanation": "  ", "clinical_interpretation": "blank bio"},
        {"biological_explanation": 42, "clinical_interpretation": "wrong type"},
    ])
    async def test_unusable_answers_keep_template(self, high_risk, stub_generator, answer):
        text, used = await generate_explanation(high_risk, [], stub_generator(json_answer=answer), timeout=1.0)
        assert used is False
        assert text == build_template_explanation(high_risk)

    @pytest.mark.asyncio
    async def test_valid_answer_is_stripped(self, high_risk, stub_generator):
        generator = stub_generator(json_answer={
            "biological_explanation": " Bio. ",
            "clinical_interpretation": "Clinical.\n",
        })
        text, used = await generate_explanation(high_risk, [], generator, timeout=1.0)
        assert used is True
        assert text.biological_explanation == "Bio."
        assert text.clinical_interpretation == "Clinical."

    @pytest.mark.asyncio
    async def test_prompt_mentions_findings(self, high_risk, stub_generator):
        generator = stub_generator()
        await generate_explanation(high_risk, [], generator, timeout=1.0)
        assert "CYP2D6" in generator.prompts[0]
        assert "Poor Metabolizer" in generator.prompts[0]


class TestAnswerQuestion:

    @pytest.mark.asyncio
    async def test_no_generator_gives_fallback(self):
        assert await answer_question("What is CYP2D6?", None, timeout=1.0) == CHAT_FALLBACK_ANSWER

    @pytest.mark.asyncio
    async def test_answer_is_returned(self, stub_generator):
        answer = await answer_question("What is CYP2D6?", stub_generator(text_answer=" A liver enzyme. "), timeout=1.0)
        assert answer == "A liver enzyme."

    @pytest.mark.asyncio
    async def test_blank_answer_gives_fallback(self, stub_generator):
        assert await answer_question("q", stub_generator(text_answer="   "), timeout=1.0) == CHAT_FALLBACK_ANSWER

    @pytest.mark.asyncio
    async def test_timeout_gives_fallback(self, slow_generator):
        assert await answer_question("q", slow_generator, timeout=0.05) == CHAT_FALLBACK_ANSWER

    @pytest.mark.asyncio
    async def test_error_gives_fallback(self, exploding_generator):
        assert await answer_question("q", exploding_generator, timeout=1.0) == CHAT_FALLBACK_ANSWER
