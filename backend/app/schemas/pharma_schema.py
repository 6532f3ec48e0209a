from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from datetime import datetime

from app.services.pharmacogenomics.recommendation_engine import DrugRecommendation


class RiskAssessment(BaseModel):
    summary: str
    overall_risk_score: int = Field(..., ge=0, le=100)
    high_risk_variants_count: int = Field(..., ge=0)


class ProfileEntry(BaseModel):
    gene: str
    variant: str
    genotype: str
    phenotype: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class LLMExplanation(BaseModel):
    biological_explanation: str
    clinical_interpretation: str
    evidence_citation: str
    llm_available: bool = False


class QualityMetrics(BaseModel):
    variant_evidence: str = "1A"
    annotation_quality: str = "High (ClinPGx Integrated)"
    database_certainty: str = "99.4%"
    gene_confidence: Dict[str, float] = Field(default_factory=dict)


class PatientReport(BaseModel):
    patient_id: str
    timestamp: str
    risk_assessment: RiskAssessment
    pharmacogenomic_profile: List[ProfileEntry]
    clinical_recommendation: List[DrugRecommendation] = Field(..., min_length=1)
    llm_generated_explanation: LLMExplanation
    quality_metrics: QualityMetrics
    profile_persisted: Optional[bool] = Field(
        None, description="False when the profile could only be kept in memory"
    )

    @field_validator('timestamp')
    @classmethod
    def validate_timestamp(cls, v):
        try:
            datetime.fromisoformat(v.replace('Z', '+00:00'))
            return v
        except ValueError:
            raise ValueError("Timestamp must be a valid ISO 8601 string")
