import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.router import api_router
from app.core import logging as _logging_setup  # Initialize logging
from app.services.pharmacogenomics.knowledge_base import get_knowledge_base
from app.services.llm.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

app = FastAPI(
    title="PharmaGuard API",
    description="Pharmacogenomic VCF interpretation with CPIC-grounded drug recommendations",
    version="2.0.0"
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API Routers
app.include_router(api_router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    # Preload the drug knowledge base
    kb = get_knowledge_base()
    logger.info("Knowledge base ready with %d drugs", len(kb))

    if not GeminiClient().is_configured:
        logger.warning("No Gemini API key set. Reports will use template explanations.")


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "PharmaGuard"}
