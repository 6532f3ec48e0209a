"""
Recommendation Engine - Drug-level clinical recommendations for high-risk genes.

Features:
- Knowledge-base driven: every drug listing a high-risk gene is considered
- Phenotype-scaled action (avoid/switch for poor metabolizers, dose adjustment otherwise)
- Drug-specific alternatives where known
- Deduplicated by drug, capped, with a default record when nothing matches
"""

from typing import Dict, List, Optional, Sequence
from pydantic import BaseModel, Field

from .config import ScoringConfig, get_scoring_config
from .knowledge_base import DrugKnowledgeBase
from .models import GeneFinding


# ============================================================================
# Data Models
# ============================================================================

class DrugRecommendation(BaseModel):
    """One drug-level recommendation in a patient report."""
    drug: str = Field(..., description="Drug name, capitalized")
    action: str = Field(..., description="Avoid / Switch, Adjust Dose or Standard Dosage")
    reason: str = Field(..., description="Gene, phenotype and guideline excerpt")
    alternative: Optional[str] = Field(None, description="Alternative drugs or referral")
    evidence_level: Optional[str] = Field(None, description="PharmGKB level of evidence")


class RecommendationSet(BaseModel):
    """Recommendations plus the guideline sources they cite."""
    recommendations: List[DrugRecommendation]
    citations: List[str]


ACTION_AVOID = "Avoid / Switch"
ACTION_ADJUST = "Adjust Dose"

DEFAULT_ALTERNATIVE = "See Clinical Pharmacist for Alternatives"
BASE_CITATION = "CPIC Guidelines v4.2"

STANDARD_RECOMMENDATION = DrugRecommendation(
    drug="Standard Medications",
    action="Standard Dosage",
    reason="No high-risk genetic variants detected for primary metabolic pathways.",
)


# ============================================================================
# Drug-Specific Alternative Mappings
# ============================================================================

DRUG_ALTERNATIVES: Dict[str, List[str]] = {
    # Antiplatelets
    "clopidogrel": ["Prasugrel", "Ticagrelor"],

    # Opioids
    "codeine": ["Morphine", "Hydromorphone", "Oxycodone"],
    "tramadol": ["Morphine", "Hydromorphone"],

    # Antidepressants (CYP2D6)
    "amitriptyline": ["Citalopram", "Sertraline", "Venlafaxine"],
    "nortriptyline": ["Citalopram", "Sertraline"],

    # Antidepressants (CYP2C19)
    "citalopram": ["Sertraline", "Venlafaxine"],
    "escitalopram": ["Sertraline", "Venlafaxine"],

    # Proton pump inhibitors
    "omeprazole": ["Pantoprazole", "Rabeprazole"],

    # Thiopurines
    "azathioprine": ["Mycophenolate mofetil", "Methotrexate"],
    "mercaptopurine": ["Methotrexate"],

    # Fluoropyrimidines
    "fluorouracil": ["Capecitabine (with dose adjustment)", "Raltitrexed"],
    "capecitabine": ["Raltitrexed", "Fluorouracil (with dose adjustment)"],

    # Anticoagulants
    "warfarin": ["Apixaban", "Rivaroxaban", "Dabigatran"],

    # Statins
    "simvastatin": ["Rosuvastatin", "Pravastatin"],
}


def capitalize_drug(name: str) -> str:
    """Uppercase the first character only: 'codeine' -> 'Codeine'."""
    return name[:1].upper() + name[1:]


def action_for_phenotype(phenotype: str) -> str:
    return ACTION_AVOID if "poor" in phenotype.lower() else ACTION_ADJUST


# ============================================================================
# Recommendation Generator
# ============================================================================

class RecommendationEngine:
    """
    Generate drug recommendations for the high-risk subset of findings.

    For each high-risk gene (in finding order) every knowledge-base drug that
    lists the gene yields one candidate. The first candidate per drug wins and
    the list is capped at max_recommendations.
    """

    def __init__(
        self,
        knowledge_base: DrugKnowledgeBase,
        config: Optional[ScoringConfig] = None,
        drug_alternatives: Optional[Dict[str, List[str]]] = None,
    ):
        self.knowledge_base = knowledge_base
        self.config = config or get_scoring_config()
        self.drug_alternatives = drug_alternatives or DRUG_ALTERNATIVES

    def _alternative_for(self, drug: str) -> str:
        alternatives = self.drug_alternatives.get(drug.lower())
        if alternatives:
            return "Consider: " + ", ".join(alternatives)
        return DEFAULT_ALTERNATIVE

    def _reason(self, finding: GeneFinding, advice: str) -> str:
        excerpt = advice[: self.config.guidance_excerpt_chars]
        return f"{finding.gene} {finding.phenotype} detected. {excerpt}..."

    def generate(self, high_risk: Sequence[GeneFinding]) -> RecommendationSet:
        candidates: List[DrugRecommendation] = []
        citations: List[str] = [BASE_CITATION]

        for finding in high_risk:
            for drug, entry in self.knowledge_base.iter_drugs_for_gene(finding.gene):
                evidence = entry.evidence_for_gene(finding.gene)
                candidates.append(DrugRecommendation(
                    drug=capitalize_drug(drug),
                    action=action_for_phenotype(finding.phenotype),
                    reason=self._reason(finding, entry.guidelines.advice),
                    alternative=self._alternative_for(drug),
                    evidence_level=(evidence.level if evidence and evidence.level
                                    else self.config.default_evidence_level),
                ))
                source = entry.guidelines.source
                if source and source not in citations:
                    citations.append(source)

        unique: List[DrugRecommendation] = []
        seen = set()
        for rec in candidates:
            if rec.drug in seen:
                continue
            seen.add(rec.drug)
            unique.append(rec)
        unique = unique[: self.config.max_recommendations]

        if not unique:
            unique = [STANDARD_RECOMMENDATION.model_copy()]

        return RecommendationSet(recommendations=unique, citations=citations)
