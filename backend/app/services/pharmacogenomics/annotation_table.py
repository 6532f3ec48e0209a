"""
annotation_table.py
===================
Curated pharmacogenomic marker panel with CPIC-aligned genotype → phenotype maps.

Each rsID carries its gene, the star/allele label of the alternate allele, its
functional impact, the PharmGKB evidence level and an annotation confidence.
Phenotype maps are keyed by the unphased genotype code observed in the VCF
sample column.

Sources: CPIC guidelines (https://cpicpgx.org/genes-drugs/), PharmGKB clinical annotations.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple

WILD_TYPE_GT = "0/0"
HETEROZYGOUS_GT = "0/1"
HOMOZYGOUS_GT = "1/1"

GENOTYPE_CODES: Tuple[str, str, str] = (WILD_TYPE_GT, HETEROZYGOUS_GT, HOMOZYGOUS_GT)


@dataclass(frozen=True)
class VariantDefinition:
    rsid: str
    gene: str
    allele: str
    impact: str
    evidence_level: str
    confidence_score: float
    phenotype_map: Mapping[str, str]

    def __post_init__(self) -> None:
        if set(self.phenotype_map) != set(GENOTYPE_CODES):
            raise ValueError(
                f"{self.rsid}: phenotype map must define exactly {GENOTYPE_CODES}"
            )
        if not 0.0 <= self.confidence_score <= 1.0:
            raise ValueError(f"{self.rsid}: confidence score out of range")
        object.__setattr__(self, "phenotype_map", MappingProxyType(dict(self.phenotype_map)))

    @property
    def normal_phenotype(self) -> str:
        return self.phenotype_map[WILD_TYPE_GT]

    def phenotype_for(self, genotype: str) -> str:
        """Phenotype for a genotype code; unmapped codes fall back to wild type."""
        return self.phenotype_map.get(genotype, self.normal_phenotype)


def _metabolizer_map(het: str = "Intermediate Metabolizer", hom: str = "Poor Metabolizer") -> Dict[str, str]:
    return {WILD_TYPE_GT: "Normal Metabolizer", HETEROZYGOUS_GT: het, HOMOZYGOUS_GT: hom}


_DEFINITIONS: List[VariantDefinition] = [

    # ── CYP2D6 ──────────────────────────────────────────────────────────────
    # Codeine, tramadol, tamoxifen
    VariantDefinition("rs3892097", "CYP2D6", "*4", "loss_of_function", "Level 1A", 0.99,
                      _metabolizer_map()),
    VariantDefinition("rs1065852", "CYP2D6", "*10", "decreased_function", "Level 1A", 0.95,
                      _metabolizer_map(hom="Intermediate Metabolizer")),

    # ── CYP2C19 ─────────────────────────────────────────────────────────────
    # Clopidogrel, SSRIs
    VariantDefinition("rs12248560", "CYP2C19", "*17", "increased_function", "Level 1A", 0.98,
                      _metabolizer_map(het="Rapid Metabolizer", hom="Ultrarapid Metabolizer")),
    VariantDefinition("rs4244285", "CYP2C19", "*2", "loss_of_function", "Level 1A", 0.99,
                      _metabolizer_map()),

    # ── CYP2C9 ──────────────────────────────────────────────────────────────
    # Warfarin, phenytoin
    VariantDefinition("rs1799853", "CYP2C9", "*2", "decreased_function", "Level 1A", 0.97,
                      _metabolizer_map()),

    # ── SLCO1B1 ─────────────────────────────────────────────────────────────
    # Statins; transporter, so function labels instead of metabolizer labels
    VariantDefinition("rs4149056", "SLCO1B1", "*5", "decreased_function", "Level 1A", 0.96,
                      {WILD_TYPE_GT: "Normal Function",
                       HETEROZYGOUS_GT: "Decreased Function",
                       HOMOZYGOUS_GT: "Poor Function"}),

    # ── DPYD ────────────────────────────────────────────────────────────────
    # Fluoropyrimidines (5-FU, capecitabine)
    VariantDefinition("rs3918290", "DPYD", "*2A", "loss_of_function", "Level 1A", 0.99,
                      _metabolizer_map()),

    # ── TPMT ────────────────────────────────────────────────────────────────
    # Thiopurines
    VariantDefinition("rs1142345", "TPMT", "*3A", "loss_of_function", "Level 1A", 0.99,
                      _metabolizer_map()),

    # ── VKORC1 ──────────────────────────────────────────────────────────────
    # Warfarin sensitivity
    VariantDefinition("rs9923231", "VKORC1", "T", "sensitive", "Level 1A", 0.99,
                      {WILD_TYPE_GT: "Normal Sensitivity",
                       HETEROZYGOUS_GT: "Increased Sensitivity",
                       HOMOZYGOUS_GT: "High Sensitivity"}),

    # ── NUDT15 ──────────────────────────────────────────────────────────────
    # Thiopurine toxicity
    VariantDefinition("rs116855232", "NUDT15", "T", "loss_of_function", "Level 1A", 0.99,
                      _metabolizer_map()),

    # ── CYP4F2 ──────────────────────────────────────────────────────────────
    # Warfarin
    VariantDefinition("rs2108622", "CYP4F2", "T", "decreased_function", "Level 1A", 0.97,
                      _metabolizer_map()),
]

# rsID → definition, in declaration order. Read-only.
ANNOTATION_TABLE: Mapping[str, VariantDefinition] = MappingProxyType(
    {d.rsid: d for d in _DEFINITIONS}
)


def get_variant_definition(rsid: str) -> VariantDefinition | None:
    return ANNOTATION_TABLE.get(rsid)


def iter_panel_genes(table: Mapping[str, VariantDefinition] = ANNOTATION_TABLE) -> Iterator[str]:
    """Yield each gene of the panel once, in declaration order."""
    seen = set()
    for definition in table.values():
        if definition.gene not in seen:
            seen.add(definition.gene)
            yield definition.gene
