"""
Analysis Pipeline - Orchestrates VCF → genotypes → gene findings → profile → report.

Receives the raw upload from the API route, persists the patient profile,
builds the PatientReport and posts the completion notification.
"""
import logging
import time
from datetime import datetime
from typing import Optional, Union

from app.schemas.pharma_schema import PatientReport
from app.services.llm.text_generator import TextGenerator
from app.services.pharmacogenomics.config import PharmaGuardConfig, get_config
from app.services.pharmacogenomics.knowledge_base import DrugKnowledgeBase
from app.services.pharmacogenomics.phenotype_mapper import resolve_gene_findings
from app.services.pharmacogenomics.report_builder import generate_patient_report
from app.services.storage.notifications import NotificationService
from app.services.storage.profiles import ProfileRepository
from app.services.vcf.parser import extract_genotypes

logger = logging.getLogger(__name__)

COMPLETION_TITLE = "Genome Analysis Complete"


def default_profile_name(now: Optional[datetime] = None) -> str:
    return f"Patient {(now or datetime.now()).strftime('%Y-%m-%d')}"


async def run_upload_pipeline(
    content: Union[str, bytes],
    file_name: str,
    *,
    profiles: ProfileRepository,
    notifications: NotificationService,
    knowledge_base: DrugKnowledgeBase,
    generator: Optional[TextGenerator] = None,
    config: Optional[PharmaGuardConfig] = None,
) -> PatientReport:
    """
    Full pipeline: extract → resolve → create profile → report → notify.

    A store outage never fails the upload: the profile falls back to an
    ephemeral record and the report says so via profile_persisted=False.
    """
    config = config or get_config()
    start_time = time.time()
    logger.info("Starting analysis pipeline for %s", file_name)

    observed = extract_genotypes(content)
    findings = resolve_gene_findings(observed)
    logger.info("Resolved %d gene findings from %d target variants", len(findings), len(observed))

    profile = profiles.create_profile(
        name=default_profile_name(),
        genes=findings,
        file_name=file_name,
    )

    report = await generate_patient_report(
        profile.id, findings, knowledge_base, generator, config=config
    )
    report = report.model_copy(update={"profile_persisted": not profile.ephemeral})

    notifications.add_notification(
        COMPLETION_TITLE,
        f"Report generated for {file_name} predicting risks with Level 1A CPIC evidence.",
        "success",
    )

    logger.info("Pipeline execution time: %.2fs", time.time() - start_time)
    return report
