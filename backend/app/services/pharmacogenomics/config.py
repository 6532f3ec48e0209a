"""
Configuration for pharmacogenomics service.
Centralizes tunable parameters for risk scoring, report synthesis, the LLM
explanation collaborator and the record store.
"""

import json
import os
from pathlib import Path
from typing import List

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

# Load .env file (walks up directories to find it)
load_dotenv(find_dotenv())

BACKEND_DIR = Path(__file__).resolve().parent.parent.parent.parent


def _env_list(name: str) -> List[str]:
    return [k.strip() for k in os.environ.get(name, "").split(",") if k.strip()]


class ScoringConfig(BaseModel):
    """Risk score and recommendation parameters."""

    baseline_risk_score: float = Field(
        default=15.0,
        ge=0.0,
        le=100.0,
        description="Score reported when no high-risk gene is present"
    )

    points_per_high_risk_gene: float = Field(
        default=25.0,
        ge=0.0,
        description="Score added for each high-risk gene"
    )

    max_risk_score: float = Field(
        default=100.0,
        ge=0.0,
        le=100.0,
        description="Upper bound of the risk score"
    )

    max_recommendations: int = Field(
        default=5,
        ge=1,
        description="Maximum number of drug recommendations in a report"
    )

    guidance_excerpt_chars: int = Field(
        default=150,
        ge=0,
        description="Characters of guideline advice quoted in a recommendation reason"
    )

    default_evidence_level: str = Field(
        default="1A",
        description="Evidence level used when no clinical variant entry matches"
    )

    default_gene_confidence: float = Field(
        default=0.98,
        ge=0.0,
        le=1.0,
        description="Annotation confidence reported when a finding carries none"
    )


class LLMConfig(BaseModel):
    """Gemini text-generation collaborator."""

    api_keys: List[str] = Field(
        default_factory=lambda: _env_list("GEMINI_API_KEY") + _env_list("GEMINI_API_KEYS"),
        description="API keys tried in order until one succeeds"
    )

    model: str = Field(
        default_factory=lambda: os.environ.get("GEMINI_MODEL", "gemini-2.5-flash"),
        description="Gemini model name"
    )

    api_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
        description="Gemini REST endpoint root"
    )

    timeout_seconds: float = Field(
        default_factory=lambda: float(os.environ.get("LLM_TIMEOUT_SECONDS", "8.0")),
        gt=0.0,
        description="Upper bound for one explanation request"
    )

    chat_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Upper bound for one chat request"
    )


class StorageConfig(BaseModel):
    """Record store selection."""

    backend: str = Field(
        default_factory=lambda: os.environ.get("PHARMAGUARD_STORAGE", "memory"),
        description="'memory' or 'json'"
    )

    path: str = Field(
        default_factory=lambda: os.environ.get("PHARMAGUARD_STORAGE_PATH", "data/store"),
        description="Directory for the JSON file store (relative to backend root)"
    )


class PharmaGuardConfig(BaseModel):
    """Main configuration for pharmacogenomics service."""

    scoring: ScoringConfig = Field(
        default_factory=ScoringConfig,
        description="Risk scoring configuration"
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="LLM explanation configuration"
    )

    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Record store configuration"
    )

    # Data paths
    knowledge_base_path: str = Field(
        default_factory=lambda: os.environ.get("PHARMAGUARD_KB_PATH", "data/advanced_drug_db.json"),
        description="Path to the drug knowledge base (relative to backend root)"
    )

    max_upload_bytes: int = Field(
        default=50 * 1024 * 1024,
        gt=0,
        description="Largest accepted VCF upload"
    )


def resolve_backend_path(path: str) -> Path:
    """Absolute path for a config path given relative to the backend root."""
    p = Path(path)
    return p if p.is_absolute() else BACKEND_DIR / p


# Global configuration instance
_config: PharmaGuardConfig = PharmaGuardConfig()


def get_config() -> PharmaGuardConfig:
    """Get the global configuration instance."""
    return _config


def update_config(**kwargs) -> PharmaGuardConfig:
    """Update configuration parameters."""
    global _config
    current_dict = _config.model_dump()

    # Update nested parameters
    for key, value in kwargs.items():
        if '.' in key:
            # Handle nested keys like 'scoring.max_recommendations'
            parts = key.split('.')
            current = current_dict
            for part in parts[:-1]:
                current = current[part]
            current[parts[-1]] = value
        else:
            current_dict[key] = value

    _config = PharmaGuardConfig(**current_dict)
    return _config


def reset_config() -> PharmaGuardConfig:
    """Restore defaults (re-reading the environment)."""
    global _config
    _config = PharmaGuardConfig()
    return _config


def load_config_from_file(filepath: str) -> PharmaGuardConfig:
    """Load configuration from a JSON file."""
    global _config

    with open(filepath, 'r') as f:
        config_dict = json.load(f)

    _config = PharmaGuardConfig(**config_dict)
    return _config


def save_config_to_file(filepath: str):
    """Save current configuration to a JSON file. API keys are never written."""
    with open(filepath, 'w') as f:
        json.dump(_config.model_dump(exclude={"llm": {"api_keys"}}), f, indent=2)


# Convenience accessors
def get_scoring_config() -> ScoringConfig:
    """Get risk scoring configuration."""
    return _config.scoring


def get_llm_config() -> LLMConfig:
    """Get LLM configuration."""
    return _config.llm
