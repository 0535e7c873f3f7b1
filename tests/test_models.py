"""Tests for record and form models."""

from datetime import date, time

import pytest
from pydantic import ValidationError

from corkscrew.models import (
    AuthCallbackPayload,
    Job,
    JobCreate,
    ProfileUpdate,
    Review,
    SignUpRequest,
    split_list,
)


class TestSplitList:
    def test_trims_and_drops_empty(self):
        assert split_list(" Mixology, ,Barback ,") == ["Mixology", "Barback"]

    def test_empty(self):
        assert split_list("") is None
        assert split_list(None) is None
        assert split_list(" , ") is None


class TestJob:
    def test_timestamp_event_date(self):
        job = Job(
            id="j1",
            client_id="c1",
            title="Server",
            description="Serve",
            event_date="2025-07-04T00:00:00+00:00",
            location="Austin",
        )
        assert job.event_date == date(2025, 7, 4)
        assert job.status == "open"

    def test_unknown_columns_ignored(self):
        job = Job.model_validate(
            {
                "id": "j1",
                "client_id": "c1",
                "title": "Server",
                "description": "Serve",
                "event_date": "2025-07-04",
                "location": "Austin",
                "updated_at": "2025-07-01T00:00:00Z",
            }
        )
        assert not hasattr(job, "updated_at")


class TestJobCreate:
    def test_blank_optional_fields(self):
        job = JobCreate(
            title="Bartender",
            description="x" * 40,
            event_date="2025-07-04",
            start_time="",
            end_time="22:30",
            location="Austin",
            rate="",
        )
        assert job.start_time is None
        assert job.end_time == time(22, 30)
        assert job.rate is None

    def test_title_too_short(self):
        with pytest.raises(ValidationError):
            JobCreate(title="Bar", description="x" * 40, event_date="2025-07-04", location="Austin")


class TestSignUpRequest:
    BASE = {
        "full_name": "Sam Rivera",
        "email": "sam@example.com",
        "password": "hunter22",
        "confirm_password": "hunter22",
        "role": "hire",
        "terms": True,
    }

    def test_valid(self):
        assert SignUpRequest(**self.BASE).role == "hire"

    def test_unknown_role(self):
        with pytest.raises(ValidationError):
            SignUpRequest(**{**self.BASE, "role": "admin"})

    def test_passwords_must_match(self):
        with pytest.raises(ValidationError, match="Passwords must match"):
            SignUpRequest(**{**self.BASE, "confirm_password": "hunter23"})


class TestProfileUpdate:
    def test_to_row(self):
        form = ProfileUpdate(
            full_name="Jordan Lee",
            role="hire",
            bio="   ",
            skills="Planning, Catering",
            certifications="TABC",
        )
        row = form.to_row("usr_1")
        assert row["id"] == "usr_1"
        assert row["bio"] is None
        assert row["skills"] == ["Planning", "Catering"]
        assert row["certifications"] == ["TABC"]

    def test_bio_length(self):
        with pytest.raises(ValidationError):
            ProfileUpdate(full_name="Jordan Lee", role="hire", bio="x" * 601)


def test_review_rating_bounds():
    with pytest.raises(ValidationError):
        Review(id="r1", job_id="j1", reviewer_id="a", reviewee_id="b", rating=6)


def test_callback_payload_ignores_extra_session_fields():
    payload = AuthCallbackPayload.model_validate(
        {
            "event": "SIGNED_IN",
            "session": {"access_token": "a", "refresh_token": "r", "user": {"id": "u"}, "expires_in": 3600},
        }
    )
    assert payload.session.access_token == "a"
