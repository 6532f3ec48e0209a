"""
PharmGKB ETL (Extract, Transform, Load) script.
Processes PharmGKB / ClinPGx exports and generates the drug knowledge base JSON.

Handles 4 data sources, all keyed by lowercase drug name:
  1. relationships/relationships.tsv           → genes (Gene → Chemical rows only)
  2. clinicalVariants/clinicalVariants.tsv     → clinical_variants
  3. drugLabels/drugLabels.tsv                 → fda_labels
  4. guidelineAnnotations/*.json               → guidelines (HTML summary stripped)

Usage:
    python -m app.utils.pharmgkb_etl <pharmgkb_data_dir> <output.json>
"""

import csv
import json
import logging
import re
import sys
from pathlib import Path
from typing import Callable, Dict, List, Set

import pandas as pd

from app.services.pharmacogenomics.knowledge_base import (
    DEFAULT_ADVICE,
    DEFAULT_GUIDELINE_SOURCE,
    DrugKnowledgeBase,
)

logger = logging.getLogger(__name__)

HTML_TAG = re.compile(r"<[^>]*>?")


def strip_html(html: str) -> str:
    return HTML_TAG.sub("", html or "")


def split_drugs(value: str, sep: str) -> List[str]:
    return [d.strip().lower() for d in (value or "").split(sep) if d.strip()]


class PharmGKBDataProcessor:
    """Merges PharmGKB exports into one drug-keyed knowledge base."""

    def __init__(self, data_dir: str, output_file: str):
        self.data_dir = Path(data_dir)
        self.output_file = Path(output_file)
        self.drug_genes: Dict[str, Set[str]] = {}
        self.drug_variants: Dict[str, List[dict]] = {}
        self.drug_labels: Dict[str, List[dict]] = {}
        self.drug_guidelines: Dict[str, dict] = {}

    def _read_tsv(self, relative: str) -> pd.DataFrame:
        path = self.data_dir / relative
        if not path.exists():
            logger.warning("Missing file: %s", path)
            return pd.DataFrame()
        df = pd.read_csv(path, sep="\t", dtype=str, keep_default_na=False, quoting=csv.QUOTE_NONE)
        df.columns = [c.strip() for c in df.columns]
        for column in df.columns:
            df[column] = df[column].str.strip()
        return df

    def _for_each_row(self, df: pd.DataFrame, columns: List[str], handle: Callable[[dict], None]) -> None:
        missing = [c for c in columns if c not in df.columns]
        if df.empty:
            return
        if missing:
            logger.warning("Skipping table without columns %s", missing)
            return
        for row in df[columns].to_dict(orient="records"):
            handle(row)

    def process_relationships(self):
        """Gene → Chemical relationships become the drug's gene list."""
        df = self._read_tsv("relationships/relationships.tsv")

        def handle(row):
            if row["Entity1_type"] == "Gene" and row["Entity2_type"] == "Chemical":
                drug = row["Entity2_name"].lower()
                self.drug_genes.setdefault(drug, set()).add(row["Entity1_name"])

        self._for_each_row(df, ["Entity1_name", "Entity1_type", "Entity2_name", "Entity2_type"], handle)
        logger.info("Relationships: %d drugs with gene links", len(self.drug_genes))

    def process_clinical_variants(self):
        df = self._read_tsv("clinicalVariants/clinicalVariants.tsv")

        def handle(row):
            for drug in split_drugs(row["chemicals"], ","):
                self.drug_variants.setdefault(drug, []).append({
                    "variant": row["variant"],
                    "gene": row["gene"],
                    "level": row["level of evidence"],
                    "phenotypes": row["phenotypes"],
                })

        self._for_each_row(df, ["variant", "gene", "level of evidence", "chemicals", "phenotypes"], handle)
        logger.info("Clinical variants: %d drugs", len(self.drug_variants))

    def process_drug_labels(self):
        df = self._read_tsv("drugLabels/drugLabels.tsv")

        def handle(row):
            for drug in split_drugs(row["Chemicals"], ";"):
                self.drug_labels.setdefault(drug, []).append({
                    "source": row["Source"],
                    "level": row["Testing Level"],
                    "name": row["Name"],
                })

        self._for_each_row(df, ["Name", "Source", "Testing Level", "Chemicals"], handle)
        logger.info("Drug labels: %d drugs", len(self.drug_labels))

    def process_guidelines(self):
        """One guideline annotation per file; later files overwrite earlier ones per drug."""
        guideline_dir = self.data_dir / "guidelineAnnotations"
        if not guideline_dir.exists():
            logger.warning("Missing directory: %s", guideline_dir)
            return

        for path in sorted(guideline_dir.glob("*.json")):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    guideline = json.load(f).get("guideline")
            except (OSError, json.JSONDecodeError, AttributeError) as e:
                logger.warning("Skipping guideline %s: %s", path.name, e)
                continue
            if not guideline or not guideline.get("relatedChemicals"):
                continue

            summary = strip_html((guideline.get("summaryMarkdown") or {}).get("html", ""))
            for chemical in guideline["relatedChemicals"]:
                self.drug_guidelines[chemical["name"].lower()] = {
                    "advice": summary,
                    "source": guideline.get("source") or "CPIC",
                }
        logger.info("Guidelines: %d drugs", len(self.drug_guidelines))

    def process_all(self) -> Dict[str, dict]:
        self.process_relationships()
        self.process_clinical_variants()
        self.process_drug_labels()
        self.process_guidelines()
        return self.merge()

    def merge(self) -> Dict[str, dict]:
        drugs = (
            list(self.drug_genes) + list(self.drug_variants)
            + list(self.drug_labels) + list(self.drug_guidelines)
        )
        result: Dict[str, dict] = {}
        for drug in dict.fromkeys(drugs):
            result[drug] = {
                "genes": sorted(self.drug_genes.get(drug, set())),
                "clinical_variants": self.drug_variants.get(drug, []),
                "fda_labels": self.drug_labels.get(drug, []),
                "guidelines": self.drug_guidelines.get(
                    drug, {"advice": DEFAULT_ADVICE, "source": DEFAULT_GUIDELINE_SOURCE}
                ),
            }
        logger.info("Ingestion complete. Processed %d entities.", len(result))
        return result

    def save(self, data: Dict[str, dict]):
        """Validate against the knowledge base schema, then write JSON."""
        DrugKnowledgeBase.from_dict(data)
        self.output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.output_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logger.info("Saved knowledge base to %s", self.output_file)


def main(argv: List[str]) -> int:
    """Main ETL execution."""
    if len(argv) < 3 or "--help" in argv:
        print("Usage: python -m app.utils.pharmgkb_etl <pharmgkb_data_dir> <output.json>")
        return 0

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    data_dir, output_file = argv[1], argv[2]
    if not Path(data_dir).is_dir():
        print(f"Data directory not found: {data_dir}")
        return 2

    processor = PharmGKBDataProcessor(data_dir, output_file)
    processor.save(processor.process_all())
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
