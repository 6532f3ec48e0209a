"""
Patient profiles: the resolved gene findings of one upload, with risk badges.
"""

import logging
import uuid
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from app.services.pharmacogenomics.models import GeneFinding, ProfileGene
from app.services.pharmacogenomics.risk_scoring import classify_risk_level

from .record_store import RecordStore, StoreUnavailableError, utc_now_iso

logger = logging.getLogger(__name__)


class ProfileRecord(BaseModel):
    id: str
    name: str
    genes: List[ProfileGene] = Field(default_factory=list)
    file_path: Optional[str] = None
    file_name: Optional[str] = None
    uploaded_at: Optional[str] = None
    created_at: str
    updated_at: str
    ephemeral: bool = Field(False, description="True when the store was unavailable and the profile lives only in this response")


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    genes: Optional[List[GeneFinding]] = None
    file_path: Optional[str] = None
    file_name: Optional[str] = None


def apply_risk_level(genes: Sequence[GeneFinding]) -> List[ProfileGene]:
    """Attach the Toxic / Adjust Dose / Safe badge to every gene."""
    return [
        ProfileGene(
            **g.model_dump(exclude={"risk_level"}),
            risk_level=classify_risk_level(g.phenotype),
        )
        for g in genes
    ]


class ProfileRepository:
    """Profile operations over a RecordStore."""

    def __init__(self, store: RecordStore):
        self.store = store

    def create_profile(
        self,
        name: str,
        genes: Sequence[GeneFinding],
        file_path: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> ProfileRecord:
        """
        Persist a new profile. If the store is unavailable, an ephemeral
        profile (ephemeral=True, never written) is returned instead.
        """
        payload = {
            "name": name,
            "genes": [g.model_dump(mode="json") for g in apply_risk_level(genes)],
            "uploaded_at": utc_now_iso(),
        }
        if file_path:
            payload["file_path"] = file_path
        if file_name:
            payload["file_name"] = file_name

        try:
            row = self.store.create(payload)
        except StoreUnavailableError as e:
            logger.warning("Database insert failed: %s. Returning temporary profile.", e)
            now = utc_now_iso()
            return ProfileRecord(
                id=str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
                ephemeral=True,
                **payload,
            )
        return ProfileRecord.model_validate(row)

    def find_profile(self, profile_id: str) -> Optional[ProfileRecord]:
        row = self.store.find_by_id(profile_id)
        return ProfileRecord.model_validate(row) if row is not None else None

    def update_profile(self, profile_id: str, updates: ProfileUpdate) -> Optional[ProfileRecord]:
        fields = updates.model_dump(exclude_none=True, exclude={"genes"})
        if updates.genes is not None:
            fields["genes"] = [g.model_dump(mode="json") for g in apply_risk_level(updates.genes)]
        row = self.store.update(profile_id, fields)
        return ProfileRecord.model_validate(row) if row is not None else None

    def list_profiles(self) -> List[ProfileRecord]:
        return [ProfileRecord.model_validate(row) for row in self.store.list_all()]
