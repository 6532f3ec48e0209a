import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.api.dependencies import (
    get_app_config,
    get_drug_knowledge_base,
    get_notification_service,
    get_profile_repository,
    get_text_generator,
)
from app.schemas.pharma_schema import PatientReport
from app.services.llm.text_generator import TextGenerator
from app.services.pharmacogenomics.config import PharmaGuardConfig
from app.services.pharmacogenomics.knowledge_base import DrugKnowledgeBase
from app.services.pipeline.analysis_pipeline import run_upload_pipeline
from app.services.storage.notifications import NotificationService
from app.services.storage.profiles import ProfileRepository

router = APIRouter()
logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".vcf", ".txt")


@router.post(
    "",
    response_model=PatientReport,
    status_code=status.HTTP_201_CREATED,
    summary="Analyze a VCF upload",
)
async def upload_vcf(
    vcf: UploadFile = File(..., description="Patient's VCF file containing genetic variants"),
    profiles: ProfileRepository = Depends(get_profile_repository),
    notifications: NotificationService = Depends(get_notification_service),
    knowledge_base: DrugKnowledgeBase = Depends(get_drug_knowledge_base),
    generator: Optional[TextGenerator] = Depends(get_text_generator),
    config: PharmaGuardConfig = Depends(get_app_config),
) -> PatientReport:
    """
    Upload a VCF file (.vcf or .txt, at most 50 MB) to generate a Pharmacogenomic Report.

    - **vcf**: The VCF file containing variant data.
    """
    filename = vcf.filename or ""
    if not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .vcf or .txt files are allowed",
        )

    # one byte past the limit is enough to reject
    content = await vcf.read(config.max_upload_bytes + 1)
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    if len(content) > config.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the {config.max_upload_bytes // (1024 * 1024)} MB limit",
        )

    try:
        return await run_upload_pipeline(
            content,
            filename,
            profiles=profiles,
            notifications=notifications,
            knowledge_base=knowledge_base,
            generator=generator,
            config=config,
        )
    except Exception as e:
        logger.exception("Unexpected error in analysis pipeline: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process VCF file",
        )
