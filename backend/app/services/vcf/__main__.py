from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

from app.services.llm.gemini_client import GeminiClient
from app.services.pharmacogenomics.knowledge_base import get_knowledge_base
from app.services.pharmacogenomics.phenotype_mapper import resolve_gene_findings
from app.services.pharmacogenomics.report_builder import generate_patient_report

from .parser import extract_genotypes


def main(argv: list[str]) -> int:
    if len(argv) < 2 or "--help" in argv:
        print("Usage: python -m app.services.vcf <path-to.vcf> [--with-llm]")
        return 0

    path = Path(argv[1])
    if not path.exists():
        print(f"File not found: {path}")
        return 2

    generator = None
    if "--with-llm" in argv:
        client = GeminiClient()
        if not client.is_configured:
            print("Error: --with-llm requires GEMINI_API_KEY or GEMINI_API_KEYS")
            return 2
        generator = client

    observed = extract_genotypes(path)
    findings = resolve_gene_findings(observed)
    patient_id = path.name.split(".")[0]

    report = asyncio.run(
        generate_patient_report(patient_id, findings, get_knowledge_base(), generator)
    )
    print(json.dumps(report.model_dump(mode="json", exclude_none=True), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
