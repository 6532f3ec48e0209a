import json
from typing import Sequence

from app.services.pharmacogenomics.models import GeneFinding
from app.services.pharmacogenomics.recommendation_engine import DrugRecommendation


def build_report_prompt(
    high_risk: Sequence[GeneFinding],
    recommendations: Sequence[DrugRecommendation],
) -> str:
    """
    Constructs the prompt asking the LLM to paraphrase a report explanation.

    Args:
        high_risk: High-risk gene findings.
        recommendations: Drug recommendations already decided by the engine.

    Returns:
        A prompt demanding a two-field JSON answer.
    """
    findings = json.dumps([{"gene": f.gene, "phenotype": f.phenotype} for f in high_risk])
    actions = json.dumps([{"drug": r.drug, "action": r.action} for r in recommendations])
    return (
        "You are a Clinical Pharmacogenomics Expert.\n"
        f"Patient Genetic Findings: {findings}\n"
        f"Clinical Recommendations: {actions}\n\n"
        "Provide a professional summary for a medical report:\n"
        '1. A brief "biological_explanation" (2-3 sentences) on how these variants impact enzyme activity.\n'
        '2. A "clinical_interpretation" (2-3 sentences) on the medical implications and next steps for the physician.\n\n'
        'RESPONSE MUST BE ONLY JSON: {"biological_explanation": "...", "clinical_interpretation": "..."}'
    )


def build_chat_prompt(question: str) -> str:
    """Prompt for the clinical assistant chat."""
    return (
        "You are PharmaGuard AI, an expert clinical pharmacogenomics assistant.\n"
        "You help users and clinicians understand precision medicine, genetic drug testing, and pharmacogenomics.\n"
        "Answer the following question clearly and concisely in 2-3 short paragraphs, "
        "representing the PharmaGuard platform AI.\n\n"
        f"Question: {question}"
    )
