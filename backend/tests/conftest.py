"""
Shared fixtures: VCF builders, the shipped knowledge base, stub LLM
collaborators and an always-failing record store.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from app.services.pharmacogenomics.config import BACKEND_DIR, reset_config
from app.services.pharmacogenomics.knowledge_base import DrugKnowledgeBase
from app.services.storage.record_store import StoreUnavailableError

VCF_HEADER = (
    "##fileformat=VCFv4.2\n"
    "##source=PharmaGuardTest\n"
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tSAMPLE\n"
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Every test starts from default config with no LLM credentials."""
    for name in ("GEMINI_API_KEY", "GEMINI_API_KEYS", "PHARMAGUARD_STORAGE", "LLM_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def make_vcf():
    """Build VCF text from (rsid, sample_field) pairs."""
    def _make(*calls, header: str = VCF_HEADER) -> str:
        lines = [
            f"22\t{42126611 + i}\t{rsid}\tC\tT\t99\tPASS\t.\tGT\t{sample}\n"
            for i, (rsid, sample) in enumerate(calls)
        ]
        return header + "".join(lines)
    return _make


@pytest.fixture(scope="session")
def knowledge_base():
    return DrugKnowledgeBase.from_file(BACKEND_DIR / "data" / "advanced_drug_db.json")


class StubGenerator:
    """TextGenerator returning canned answers and recording prompts."""

    def __init__(self, json_answer: Optional[Dict[str, Any]] = None, text_answer: Optional[str] = None):
        self.json_answer = json_answer
        self.text_answer = text_answer
        self.prompts: List[str] = []

    async def generate_json(self, prompt: str, *, timeout: float):
        self.prompts.append(prompt)
        return self.json_answer

    async def generate_text(self, prompt: str, *, timeout: float):
        self.prompts.append(prompt)
        return self.text_answer


class SlowGenerator(StubGenerator):
    """Never answers within any reasonable timeout."""

    async def generate_json(self, prompt: str, *, timeout: float):
        self.prompts.append(prompt)
        await asyncio.sleep(10)
        return {"biological_explanation": "late", "clinical_interpretation": "late"}

    async def generate_text(self, prompt: str, *, timeout: float):
        self.prompts.append(prompt)
        await asyncio.sleep(10)
        return "late"


class ExplodingGenerator(StubGenerator):
    async def generate_json(self, prompt: str, *, timeout: float):
        raise RuntimeError("transport exploded")

    async def generate_text(self, prompt: str, *, timeout: float):
        raise RuntimeError("transport exploded")


class FailingRecordStore:
    """RecordStore whose backend is always unreachable."""

    def create(self, record):
        raise StoreUnavailableError("connection refused")

    def find_by_id(self, record_id):
        raise StoreUnavailableError("connection refused")

    def update(self, record_id, fields):
        raise StoreUnavailableError("connection refused")

    def list_all(self):
        raise StoreUnavailableError("connection refused")


@pytest.fixture
def stub_generator():
    return StubGenerator


@pytest.fixture
def slow_generator():
    return SlowGenerator()


@pytest.fixture
def exploding_generator():
    return ExplodingGenerator()


@pytest.fixture
def failing_store():
    return FailingRecordStore()
