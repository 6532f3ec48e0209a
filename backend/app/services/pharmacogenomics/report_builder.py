"""
Report Builder - Synthesizes resolved gene findings into a patient report.

Findings → high-risk subset → risk score → knowledge-base recommendations →
explanation (template, optionally paraphrased by an LLM) → PatientReport.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from app.schemas.pharma_schema import (
    LLMExplanation,
    PatientReport,
    ProfileEntry,
    QualityMetrics,
    RiskAssessment,
)
from app.services.llm.explanation_service import generate_explanation
from app.services.llm.text_generator import TextGenerator

from .config import PharmaGuardConfig, get_config
from .knowledge_base import DrugKnowledgeBase
from .models import GeneFinding
from .recommendation_engine import RecommendationEngine
from .risk_scoring import RiskScoreCalculator, high_risk_findings

logger = logging.getLogger(__name__)

CITATION_SUFFIX = "; FDA/EMA Drug Labels 2026."


def build_profile_entries(findings: Sequence[GeneFinding], default_confidence: float) -> list:
    return [
        ProfileEntry(
            gene=f.gene,
            variant=f.rsid,
            genotype=f.genotype,
            phenotype=f.phenotype,
            confidence=f.confidence_score or default_confidence,
        )
        for f in findings
    ]


async def generate_patient_report(
    patient_id: str,
    findings: Sequence[GeneFinding],
    knowledge_base: DrugKnowledgeBase,
    generator: Optional[TextGenerator] = None,
    *,
    config: Optional[PharmaGuardConfig] = None,
) -> PatientReport:
    """
    Build the clinical report for one patient profile.

    The only awaited step is the optional LLM paraphrase, bounded by the
    configured timeout; any failure there keeps the template explanation.
    """
    config = config or get_config()
    logger.info("Generating report for profile %s (%d genes)", patient_id, len(findings))

    high_risk = high_risk_findings(findings)
    scorer = RiskScoreCalculator(config.scoring)
    risk_score = int(scorer.calculate_risk_score(len(high_risk)))

    rec_set = RecommendationEngine(knowledge_base, config.scoring).generate(high_risk)
    recommendations = rec_set.recommendations

    explanation, llm_used = await generate_explanation(
        high_risk, recommendations, generator, timeout=config.llm.timeout_seconds
    )

    profile = build_profile_entries(findings, config.scoring.default_gene_confidence)

    return PatientReport(
        patient_id=patient_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
        risk_assessment=RiskAssessment(
            summary=scorer.summarize(len(high_risk)),
            overall_risk_score=risk_score,
            high_risk_variants_count=len(high_risk),
        ),
        pharmacogenomic_profile=profile,
        clinical_recommendation=recommendations,
        llm_generated_explanation=LLMExplanation(
            biological_explanation=explanation.biological_explanation,
            clinical_interpretation=explanation.clinical_interpretation,
            evidence_citation="; ".join(rec_set.citations) + CITATION_SUFFIX,
            llm_available=llm_used,
        ),
        quality_metrics=QualityMetrics(
            variant_evidence=recommendations[0].evidence_level or config.scoring.default_evidence_level,
            gene_confidence={entry.gene: entry.confidence for entry in profile},
        ),
    )
