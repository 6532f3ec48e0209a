"""
Internal data models for pharmacogenomics service.
These models represent the intermediate data structures passed between the
variant extractor, the gene resolver and the report synthesizer.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict
from enum import Enum


# Observed genotypes for one parse call: rsID -> normalized genotype ("0/1")
ObservedGenotype = Dict[str, str]


class Phenotype(str, Enum):
    """Every phenotype label the annotation table can produce."""
    POOR_METABOLIZER = "Poor Metabolizer"
    INTERMEDIATE_METABOLIZER = "Intermediate Metabolizer"
    NORMAL_METABOLIZER = "Normal Metabolizer"
    RAPID_METABOLIZER = "Rapid Metabolizer"
    ULTRARAPID_METABOLIZER = "Ultrarapid Metabolizer"

    # Transporter (SLCO1B1)
    POOR_FUNCTION = "Poor Function"
    DECREASED_FUNCTION = "Decreased Function"
    NORMAL_FUNCTION = "Normal Function"

    # Warfarin sensitivity (VKORC1)
    NORMAL_SENSITIVITY = "Normal Sensitivity"
    INCREASED_SENSITIVITY = "Increased Sensitivity"
    HIGH_SENSITIVITY = "High Sensitivity"


class RiskLevel(str, Enum):
    """Per-gene risk badge stored with a profile."""
    TOXIC = "Toxic"
    ADJUST_DOSE = "Adjust Dose"
    SAFE = "Safe"
    UNKNOWN = "Unknown"


class GeneFinding(BaseModel):
    """The single most significant finding for one gene."""
    model_config = ConfigDict(frozen=True)

    gene: str = Field(..., description="Gene symbol (e.g., CYP2D6)")
    rsid: str = Field(..., description="dbSNP identifier of the deciding variant")
    genotype: str = Field(..., description="Display genotype in star notation (e.g., *1/*4)")
    phenotype: str = Field(..., description="Phenotype label (e.g., Intermediate Metabolizer)")
    raw_gt: str = Field(..., description="Genotype code as observed (e.g., 0/1)")
    confidence_score: float = Field(..., ge=0.0, le=1.0, description="Annotation confidence")
    evidence_level: str = Field(..., description="Evidence level (e.g., Level 1A)")


class ProfileGene(GeneFinding):
    """GeneFinding as stored on a patient profile, with its risk badge."""
    risk_level: RiskLevel = Field(RiskLevel.UNKNOWN, description="Toxic / Adjust Dose / Safe")
