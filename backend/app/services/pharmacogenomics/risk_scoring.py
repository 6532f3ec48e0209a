"""
Risk Scoring Module - Aggregate risk score (0-100 scale) and per-gene risk badges.

Two independent rules live here:
- the high-risk heuristic (substring match on the phenotype label), which
  drives the report score and the recommendations;
- the profile risk badge (Toxic / Adjust Dose / Safe) stored with each gene.

Neither uses the severity priority of the phenotype mapper.
"""

from typing import List, Optional, Sequence

from .config import ScoringConfig, get_scoring_config
from .models import GeneFinding, RiskLevel


HIGH_RISK_MARKERS = ("poor", "rapid", "ultra")

TOXIC_MARKERS = ("poor", "slow", "rapid", "positive")
ADJUST_DOSE_MARKERS = ("intermediate", "decreased")


def is_high_risk(phenotype: str) -> bool:
    """True when the phenotype label mentions poor, rapid or ultra (any case)."""
    p = (phenotype or "").lower()
    return any(marker in p for marker in HIGH_RISK_MARKERS)


def high_risk_findings(findings: Sequence[GeneFinding]) -> List[GeneFinding]:
    """High-risk subset, order preserved."""
    return [f for f in findings if is_high_risk(f.phenotype)]


def classify_risk_level(phenotype: str) -> RiskLevel:
    """Risk badge for a gene on a stored profile."""
    p = (phenotype or "").lower()
    if any(marker in p for marker in TOXIC_MARKERS):
        return RiskLevel.TOXIC
    if any(marker in p for marker in ADJUST_DOSE_MARKERS):
        return RiskLevel.ADJUST_DOSE
    return RiskLevel.SAFE


class RiskScoreCalculator:
    """
    Bounded linear risk score.

    Formula:
        risk_score = min(max_score, per_gene × high_risk_count + baseline)

    With defaults: min(100, 25n + 15). Zero high-risk genes still scores the
    baseline of 15.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or get_scoring_config()

    def calculate_risk_score(self, high_risk_count: int) -> float:
        if high_risk_count < 0:
            raise ValueError("high_risk_count must be non-negative")
        raw = self.config.points_per_high_risk_gene * high_risk_count + self.config.baseline_risk_score
        return min(self.config.max_risk_score, raw)

    def summarize(self, high_risk_count: int) -> str:
        if high_risk_count > 0:
            return f"Actionable PGx variants found in {high_risk_count} gene(s)."
        return "No high-risk variants identified."


def calculate_risk_score(high_risk_count: int) -> int:
    """Risk score with the global configuration, as an integer."""
    return int(RiskScoreCalculator().calculate_risk_score(high_risk_count))
