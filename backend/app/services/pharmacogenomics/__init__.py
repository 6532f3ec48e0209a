"""
Pharmacogenomics Service

Annotation table, per-gene phenotype resolution, risk scoring and
knowledge-base driven drug recommendations.
"""

from .models import (
    GeneFinding,
    ObservedGenotype,
    Phenotype,
    ProfileGene,
    RiskLevel,
)
from .annotation_table import (
    ANNOTATION_TABLE,
    VariantDefinition,
    get_variant_definition,
)
from .phenotype_mapper import PhenotypeMapper, resolve_gene_findings
from .risk_scoring import (
    RiskScoreCalculator,
    calculate_risk_score,
    classify_risk_level,
    is_high_risk,
)
from .knowledge_base import (
    DrugKnowledgeBase,
    KnowledgeBaseError,
    get_knowledge_base,
    reload_knowledge_base,
)
from .recommendation_engine import DrugRecommendation, RecommendationEngine
from .config import (
    get_config,
    update_config,
    load_config_from_file,
    save_config_to_file,
)

__all__ = [
    # Models
    'GeneFinding',
    'ObservedGenotype',
    'Phenotype',
    'ProfileGene',
    'RiskLevel',

    # Annotation table
    'ANNOTATION_TABLE',
    'VariantDefinition',
    'get_variant_definition',

    # Phenotype Mapping
    'PhenotypeMapper',
    'resolve_gene_findings',

    # Risk
    'RiskScoreCalculator',
    'calculate_risk_score',
    'classify_risk_level',
    'is_high_risk',

    # Knowledge base
    'DrugKnowledgeBase',
    'KnowledgeBaseError',
    'get_knowledge_base',
    'reload_knowledge_base',

    # Recommendations
    'DrugRecommendation',
    'RecommendationEngine',
]
