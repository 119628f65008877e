"""Pydantic model unit tests for proposals and generated records."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from app.models import (
    CommercialProposal,
    GeneratedProposal,
    GeneratedProposalStatus,
    StatusUpdate,
)
from app.models.generated_proposal import format_timestamp


class TestCommercialProposal:
    def test_accepts_camel_case_and_keeps_extra_fields(self):
        proposal = CommercialProposal.model_validate({
            "id": "prop-1",
            "proposalNumber": "PROP-1",
            "cover": {"clientName": "다온"},
            "investment": {"total": 120000},
        })

        assert proposal.proposal_number == "PROP-1"
        assert proposal.cover.client_name == "다온"
        assert proposal.model_dump(by_alias=True)["investment"] == {"total": 120000}

    def test_id_is_required(self):
        with pytest.raises(ValidationError):
            CommercialProposal.model_validate({"title": "no id"})


class TestGeneratedProposal:
    def test_defaults(self):
        record = GeneratedProposal(id="gen-1", proposal_id="prop-1")

        assert record.status == GeneratedProposalStatus.GENERATED
        assert isinstance(record.generated_at, datetime)
        assert record.generated_at.tzinfo is not None
        assert record.proposal_data == {}

    def test_to_storage_omits_unset_optional_fields(self):
        record = GeneratedProposal(id="gen-1", proposal_id="prop-1", notes="메모")
        stored = record.to_storage()

        assert stored["proposalId"] == "prop-1"
        assert stored["notes"] == "메모"
        assert "pdfUrl" not in stored
        assert "generatedBy" not in stored
        assert isinstance(stored["generatedAt"], str)

    def test_generated_at_keeps_millisecond_utc_format(self):
        record = GeneratedProposal.model_validate({
            "id": "gen-1",
            "proposalId": "prop-1",
            "generatedAt": "2024-03-01T10:00:00.000Z",
        })

        assert record.to_storage()["generatedAt"] == "2024-03-01T10:00:00.000Z"

    def test_new_record_timestamp_format(self):
        stored = GeneratedProposal(id="gen-1", proposal_id="prop-1").to_storage()
        assert len(stored["generatedAt"]) == len("2024-03-01T10:00:00.000Z")
        assert stored["generatedAt"].endswith("Z")


class TestFormatTimestamp:
    def test_truncates_to_milliseconds(self):
        value = datetime(2024, 3, 1, 10, 0, 0, 123987, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2024-03-01T10:00:00.123Z"

    def test_converts_offsets_to_utc(self):
        value = datetime(2024, 3, 1, 19, 0, tzinfo=timezone(timedelta(hours=9)))
        assert format_timestamp(value) == "2024-03-01T10:00:00.000Z"

    def test_naive_value_is_treated_as_utc(self):
        assert format_timestamp(datetime(2024, 3, 1, 10, 0)) == "2024-03-01T10:00:00.000Z"

    def test_status_values(self):
        assert [s.value for s in GeneratedProposalStatus] == ["generated", "sent", "approved", "rejected"]

    def test_invalid_status_rejected(self):
        with pytest.raises(ValidationError):
            GeneratedProposal(id="gen-1", proposal_id="prop-1", status="archived")


class TestStatusUpdate:
    def test_parses_status(self):
        assert StatusUpdate.model_validate({"status": "sent"}).status == GeneratedProposalStatus.SENT
