"""Tests for viewing and editing the profile."""

from unittest.mock import AsyncMock, patch

from corkscrew.errors import RecordAccessError
from corkscrew.models import Profile
from corkscrew.routes.profile import form_values

WORKER_ID = "usr_worker_0001"


class TestProfilePage:
    def test_prefills_form(self, client, as_worker):
        row = {
            "id": WORKER_ID,
            "role": "work",
            "full_name": "Sam Rivera",
            "skills": ["Mixology", "Wine service"],
            "hourly_rate": 32.5,
            "experience_years": 4,
        }
        with patch("corkscrew.routes.profile.get_profile", new_callable=AsyncMock, return_value=row):
            response = client.get("/profile")

        assert response.status_code == 200
        form = response.json()["form"]
        assert form["full_name"] == "Sam Rivera"
        assert form["role"] == "work"
        assert form["skills"] == "Mixology, Wine service"
        assert form["hourly_rate"] == "32.5"
        assert form["experience_years"] == "4"
        assert form["certifications"] == ""

    def test_no_profile_yet(self, client, as_worker):
        with patch("corkscrew.routes.profile.get_profile", new_callable=AsyncMock, return_value=None):
            response = client.get("/profile")

        assert response.status_code == 200
        assert response.json()["profile"] is None
        assert response.json()["form"]["full_name"] == ""


class TestSaveProfile:
    FORM = {
        "full_name": "Sam Rivera",
        "role": "work",
        "bio": "",
        "skills": "Mixology, , Wine service ",
        "hourly_rate": "32",
        "location": "Austin, TX",
        "experience_years": "4",
        "certifications": "",
    }

    def test_save_splits_lists(self, client, as_worker):
        with patch("corkscrew.routes.profile.upsert_profile", new_callable=AsyncMock) as mock_upsert:
            response = client.post("/profile", json=self.FORM)

        assert response.status_code == 200
        assert response.json() == {"message": "Profile updated successfully."}
        row = mock_upsert.call_args.args[1]
        assert row["id"] == WORKER_ID
        assert row["skills"] == ["Mixology", "Wine service"]
        assert row["certifications"] is None
        assert row["bio"] is None
        assert row["hourly_rate"] == 32
        assert row["experience_years"] == 4

    def test_negative_rate_rejected(self, client, as_worker):
        with patch("corkscrew.routes.profile.upsert_profile", new_callable=AsyncMock) as mock_upsert:
            response = client.post("/profile", json={**self.FORM, "hourly_rate": "-5"})

        assert response.status_code == 422
        mock_upsert.assert_not_called()

    def test_backend_rejection(self, client, as_worker):
        with patch(
            "corkscrew.routes.profile.upsert_profile",
            new_callable=AsyncMock,
            side_effect=RecordAccessError("permission denied for table profiles"),
        ):
            response = client.post("/profile", json=self.FORM)

        assert response.status_code == 400
        assert response.json() == {"error": "permission denied for table profiles"}

    def test_requires_sign_in(self, client):
        response = client.post("/profile", json=self.FORM, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/auth/sign-in"


def test_form_values_whole_rate():
    profile = Profile(id="usr_1", role="hire", hourly_rate=40.0)
    assert form_values(profile).hourly_rate == "40"
