"""
Phenotype Mapper - Per-gene phenotype resolution over the marker panel.

Every panel variant is mapped from its observed genotype to a phenotype. When
several variants fall on the same gene, the most clinically severe phenotype
wins, ranked by a single priority function over the closed Phenotype set.

Resolution is deterministic: no learned priors, no confidence boosting.
"""

from typing import Dict, List, Mapping, Optional
import logging

from .annotation_table import (
    ANNOTATION_TABLE,
    HETEROZYGOUS_GT,
    HOMOZYGOUS_GT,
    WILD_TYPE_GT,
    VariantDefinition,
)
from .models import GeneFinding, ObservedGenotype, Phenotype

logger = logging.getLogger(__name__)

REFERENCE_ALLELE = "*1"
UNKNOWN_ALLELE = "?"

# Severity ranking, highest first. Labels outside this table rank 0.
PHENOTYPE_PRIORITY: Mapping[Phenotype, int] = {
    Phenotype.POOR_METABOLIZER: 5,
    Phenotype.POOR_FUNCTION: 5,
    Phenotype.ULTRARAPID_METABOLIZER: 4,
    Phenotype.RAPID_METABOLIZER: 4,
    Phenotype.INTERMEDIATE_METABOLIZER: 3,
    Phenotype.DECREASED_FUNCTION: 3,
    Phenotype.NORMAL_METABOLIZER: 1,
    Phenotype.NORMAL_FUNCTION: 1,
}


def phenotype_priority(label: str) -> int:
    """Severity rank of a phenotype label (0 for anything unranked or unknown)."""
    try:
        phenotype = Phenotype(label)
    except ValueError:
        return 0
    return PHENOTYPE_PRIORITY.get(phenotype, 0)


def _is_no_call(genotype: str) -> bool:
    return all(a.strip() in ("", ".") for a in genotype.split("/"))


def render_display_genotype(genotype: str, allele: str) -> str:
    """
    Star-notation genotype for display.

    0/0 -> *1/*1, 0/1 -> *1/<allele>, 1/1 -> <allele>/<allele>.
    Any other called code (e.g. 1/2) pairs the allele with an unknown marker;
    a pure no-call (./.) shows as reference.
    """
    if genotype == WILD_TYPE_GT:
        return f"{REFERENCE_ALLELE}/{REFERENCE_ALLELE}"
    if genotype == HETEROZYGOUS_GT:
        return f"{REFERENCE_ALLELE}/{allele}"
    if genotype == HOMOZYGOUS_GT:
        return f"{allele}/{allele}"
    if _is_no_call(genotype):
        return f"{REFERENCE_ALLELE}/{REFERENCE_ALLELE}"
    return f"{allele}/{UNKNOWN_ALLELE}"


class PhenotypeMapper:
    """Maps observed genotypes to one GeneFinding per panel gene."""

    def __init__(self, table: Optional[Mapping[str, VariantDefinition]] = None):
        self.table = table if table is not None else ANNOTATION_TABLE

    def map_variant(self, definition: VariantDefinition, genotype: str) -> GeneFinding:
        """Phenotype call for a single panel variant."""
        return GeneFinding(
            gene=definition.gene,
            rsid=definition.rsid,
            genotype=render_display_genotype(genotype, definition.allele),
            phenotype=definition.phenotype_for(genotype),
            raw_gt=genotype,
            confidence_score=definition.confidence_score,
            evidence_level=definition.evidence_level,
        )

    def resolve(self, observed: ObservedGenotype) -> List[GeneFinding]:
        """
        Main entry point for per-gene resolution.

        Iterates the table in declaration order. A later variant on an
        already-seen gene replaces the current finding only when its phenotype
        ranks strictly higher.
        """
        findings: Dict[str, GeneFinding] = {}

        for rsid, definition in self.table.items():
            genotype = observed.get(rsid, WILD_TYPE_GT)
            candidate = self.map_variant(definition, genotype)

            current = findings.get(definition.gene)
            if current is None:
                findings[definition.gene] = candidate
                continue

            if phenotype_priority(candidate.phenotype) > phenotype_priority(current.phenotype):
                logger.debug(
                    "%s: %s (%s) supersedes %s (%s)",
                    definition.gene, candidate.rsid, candidate.phenotype,
                    current.rsid, current.phenotype,
                )
                findings[definition.gene] = candidate

        # dicts keep insertion order, so genes come out in discovery order
        return list(findings.values())


def resolve_gene_findings(
    observed: ObservedGenotype,
    table: Optional[Mapping[str, VariantDefinition]] = None,
) -> List[GeneFinding]:
    """Convenience wrapper around PhenotypeMapper.resolve."""
    return PhenotypeMapper(table).resolve(observed)
