"""
Drug Knowledge Base - Read-only lookup of drug → genes, evidence and guidance.

The knowledge base is a JSON document built offline from PharmGKB exports by
app/utils/pharmgkb_etl.py:

    {
      "codeine": {
        "genes": ["CYP2D6"],
        "clinical_variants": [{"variant": "rs3892097", "gene": "CYP2D6", "level": "1A", "phenotypes": "..."}],
        "fda_labels": [{"source": "FDA", "level": "Actionable PGx", "name": "..."}],
        "guidelines": {"advice": "...", "source": "CPIC"}
      },
      ...
    }

STRICT CONSTRAINTS:
- No fabricated data: a gene with no entry simply yields no recommendation
- Deterministic iteration order (file order)
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from .config import get_config, resolve_backend_path

logger = logging.getLogger(__name__)

DEFAULT_ADVICE = "Follow standard protocol."
DEFAULT_GUIDELINE_SOURCE = "General"


class KnowledgeBaseError(RuntimeError):
    """Knowledge base file exists but is unreadable or malformed."""


class ClinicalVariantEntry(BaseModel):
    variant: str = ""
    gene: str = ""
    level: str = ""
    phenotypes: str = ""


class FdaLabelEntry(BaseModel):
    source: str = ""
    level: str = ""
    name: str = ""


class GuidelineEntry(BaseModel):
    advice: str = DEFAULT_ADVICE
    source: str = DEFAULT_GUIDELINE_SOURCE


class DrugEntry(BaseModel):
    genes: List[str] = Field(default_factory=list)
    clinical_variants: List[ClinicalVariantEntry] = Field(default_factory=list)
    fda_labels: List[FdaLabelEntry] = Field(default_factory=list)
    guidelines: GuidelineEntry = Field(default_factory=GuidelineEntry)

    def evidence_for_gene(self, gene: str) -> Optional[ClinicalVariantEntry]:
        """First clinical-variant entry recorded for the gene, if any."""
        for entry in self.clinical_variants:
            if entry.gene == gene:
                return entry
        return None


class DrugKnowledgeBase:
    """In-memory view of the drug knowledge base, keyed by lowercase drug name."""

    def __init__(self, drugs: Optional[Mapping[str, DrugEntry]] = None):
        self._drugs: Dict[str, DrugEntry] = dict(drugs or {})

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping]) -> "DrugKnowledgeBase":
        try:
            drugs = {name: DrugEntry.model_validate(entry) for name, entry in data.items()}
        except ValidationError as e:
            raise KnowledgeBaseError(f"Malformed knowledge base entry: {e}") from e
        return cls(drugs)

    @classmethod
    def from_file(cls, path: Path) -> "DrugKnowledgeBase":
        """Load from JSON. A missing file yields an empty knowledge base."""
        if not path.exists():
            logger.warning("Drug knowledge base not found at %s, recommendations disabled", path)
            return cls()

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise KnowledgeBaseError(f"Cannot read knowledge base {path}: {e}") from e

        if not isinstance(data, dict):
            raise KnowledgeBaseError(f"Knowledge base {path} must be a JSON object")

        kb = cls.from_dict(data)
        logger.info("Drug knowledge base loaded: %d drugs from %s", len(kb), path)
        return kb

    def __len__(self) -> int:
        return len(self._drugs)

    def __contains__(self, drug: str) -> bool:
        return drug.lower() in self._drugs

    def get(self, drug: str) -> Optional[DrugEntry]:
        return self._drugs.get(drug.lower())

    def drugs(self) -> List[str]:
        return list(self._drugs)

    def iter_drugs_for_gene(self, gene: str) -> Iterator[Tuple[str, DrugEntry]]:
        """Yield (drug, entry) for every drug listing the gene, in file order."""
        for drug, entry in self._drugs.items():
            if gene in entry.genes:
                yield drug, entry

    def to_dict(self) -> Dict[str, Dict]:
        return {drug: entry.model_dump() for drug, entry in self._drugs.items()}


_knowledge_base: Optional[DrugKnowledgeBase] = None


def get_knowledge_base() -> DrugKnowledgeBase:
    """Process-wide knowledge base, loaded on first use."""
    global _knowledge_base
    if _knowledge_base is None:
        path = resolve_backend_path(get_config().knowledge_base_path)
        _knowledge_base = DrugKnowledgeBase.from_file(path)
    return _knowledge_base


def reload_knowledge_base() -> DrugKnowledgeBase:
    """Force reload of knowledge base (e.g., after running the ETL)."""
    global _knowledge_base
    _knowledge_base = None
    return get_knowledge_base()
