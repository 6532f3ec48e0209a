"""
Tests for the upload pipeline orchestration.
"""

from datetime import datetime

import pytest

from app.services.pipeline.analysis_pipeline import default_profile_name, run_upload_pipeline
from app.services.storage.notifications import NotificationService
from app.services.storage.profiles import ProfileRepository
from app.services.storage.record_store import InMemoryRecordStore


@pytest.fixture
def profiles():
    return ProfileRepository(InMemoryRecordStore("profiles"))


@pytest.fixture
def notifications():
    return NotificationService(InMemoryRecordStore("notifications"))


class TestRunUploadPipeline:

    @pytest.mark.asyncio
    async def test_creates_profile_report_and_notification(self, make_vcf, knowledge_base, profiles, notifications):
        content = make_vcf(("rs3892097", "1/1")).encode()
        report = await run_upload_pipeline(
            content, "patient.vcf",
            profiles=profiles, notifications=notifications, knowledge_base=knowledge_base,
        )

        stored = profiles.find_profile(report.patient_id)
        assert stored is not None
        assert stored.file_name == "patient.vcf"
        assert stored.name.startswith("Patient ")
        assert report.profile_persisted is True
        assert report.risk_assessment.overall_risk_score == 40

        (note,) = notifications.list_notifications()
        assert note.title == "Genome Analysis Complete"
        assert note.message == "Report generated for patient.vcf predicting risks with Level 1A CPIC evidence."
        assert note.type == "success"

    @pytest.mark.asyncio
    async def test_store_outage_still_reports(self, make_vcf, knowledge_base, failing_store):
        report = await run_upload_pipeline(
            make_vcf(("rs3892097", "0/1")), "patient.txt",
            profiles=ProfileRepository(failing_store),
            notifications=NotificationService(failing_store),
            knowledge_base=knowledge_base,
        )

        assert report.profile_persisted is False
        assert report.risk_assessment.overall_risk_score == 15

    def test_default_profile_name(self):
        assert default_profile_name(datetime(2026, 10, 19)) == "Patient 2026-10-19"
