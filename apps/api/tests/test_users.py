"""User directory API and service tests."""

from __future__ import annotations

import os
import unittest

from fastapi.testclient import TestClient

from app.adapters.auth.mock_auth import MockProfileFetcher
from app.core.config import get_settings
from app.errors import ApiError
from app.main import create_app
from app.repositories.memory import InMemoryStore
from app.routes.dependencies import get_profile_fetcher
from app.schemas.auth import IdentityProfile
from app.schemas.user import CreateUserRequest
from app.services.users import UserService, normalize_email


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "VOLUNTEER_HOURS_AUTH_PROVIDER",
        "VOLUNTEER_HOURS_STORAGE_PROVIDER",
        "VOLUNTEER_HOURS_DATABASE_URL",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["VOLUNTEER_HOURS_AUTH_PROVIDER"] = "mock"
        os.environ["VOLUNTEER_HOURS_STORAGE_PROVIDER"] = "memory"
        os.environ.pop("VOLUNTEER_HOURS_DATABASE_URL", None)
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class UserApiTests(_SettingsEnvCase):
    def test_bootstrap_creates_user_that_later_authenticates_as_same_record(self) -> None:
        app = create_app()
        client = TestClient(app)

        created = client.post(
            "/users",
            json={"email": "a@x.com", "authProviderId": "ext-1", "name": "Ada"},
        )
        me = client.get("/users/me", headers={"Authorization": "Bearer test:ext-1"})

        self.assertEqual(created.status_code, 201)
        payload = created.json()
        self.assertEqual(payload["email"], "a@x.com")
        self.assertEqual(payload["authProviderId"], "ext-1")
        self.assertEqual(payload["role"], "student")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["id"], payload["id"])
        self.assertEqual(me.json()["name"], "Ada")
        self.assertEqual(app.state.store.user_write_count, 1)

    def test_bootstrap_rejects_duplicate_email(self) -> None:
        app = create_app()
        client = TestClient(app)
        client.post("/users", json={"email": "a@x.com", "authProviderId": "ext-1", "name": "Ada"})

        response = client.post("/users", json={"email": "a@x.com", "authProviderId": "ext-2", "name": "Bea"})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "EMAIL_ALREADY_EXISTS")
        self.assertEqual(response.json()["details"], {"field": "email"})
        self.assertEqual(len(app.state.store.users), 1)

    def test_bootstrap_and_sign_in_store_same_email_spelling(self) -> None:
        app = create_app()
        client = TestClient(app)
        app.dependency_overrides[get_profile_fetcher] = lambda: MockProfileFetcher(
            {"ext-2": IdentityProfile(email="Ada@EXAMPLE.com")}
        )

        created = client.post(
            "/users",
            json={"email": "Ada@Example.COM", "authProviderId": "ext-1", "name": "Ada"},
        )
        signed_in = client.get("/users/me", headers={"Authorization": "Bearer test:ext-2"})

        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["email"], "Ada@example.com")
        self.assertEqual(signed_in.status_code, 409)
        self.assertEqual(signed_in.json()["code"], "IDENTITY_CONFLICT")
        self.assertEqual(len(app.state.store.users), 1)

    def test_bootstrap_rejects_duplicate_auth_provider_id(self) -> None:
        app = create_app()
        client = TestClient(app)
        client.post("/users", json={"email": "a@x.com", "authProviderId": "ext-1", "name": "Ada"})

        response = client.post("/users", json={"email": "b@x.com", "authProviderId": "ext-1", "name": "Bea"})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "AUTH_PROVIDER_ID_ALREADY_EXISTS")
        self.assertEqual(response.json()["details"], {"field": "authProviderId"})

    def test_bootstrap_validates_payload(self) -> None:
        app = create_app()
        client = TestClient(app)

        for body in (
            {"email": "not-an-email", "authProviderId": "ext-1", "name": "Ada"},
            {"email": "a@x.com", "authProviderId": "   ", "name": "Ada"},
            {"email": "a@x.com", "authProviderId": "ext-1"},
            {"email": "a@x.com", "authProviderId": "ext-1", "name": "Ada", "role": "superuser"},
        ):
            with self.subTest(body=body):
                response = client.post("/users", json=body)
                self.assertEqual(response.status_code, 422)
                self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

        self.assertEqual(app.state.store.user_write_count, 0)

    def test_patch_me_updates_profile_fields(self) -> None:
        app = create_app()
        client = TestClient(app)
        headers = {"Authorization": "Bearer test:ext-1"}

        updated = client.patch("/users/me", headers=headers, json={"oen": "123456789", "schoolId": "school-1"})
        me = client.get("/users/me", headers=headers)

        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["oen"], "123456789")
        self.assertEqual(updated.json()["schoolId"], "school-1")
        self.assertEqual(me.json()["oen"], "123456789")
        self.assertEqual(me.json()["schoolId"], "school-1")

    def test_patch_me_requires_both_profile_fields(self) -> None:
        app = create_app()
        client = TestClient(app)

        response = client.patch(
            "/users/me",
            headers={"Authorization": "Bearer test:ext-1"},
            json={"oen": "123456789"},
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

    def test_patch_me_requires_authentication(self) -> None:
        app = create_app()
        client = TestClient(app)

        response = client.patch("/users/me", json={"oen": "123456789", "schoolId": "school-1"})

        self.assertEqual(response.status_code, 401)


class UserServiceUnitTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.service = UserService(self.store)

    def test_find_or_create_returns_existing_user_without_writing(self) -> None:
        first = self.service.find_or_create(auth_provider_id="ext-1", email="a@x.com", name="Ada")
        second = self.service.find_or_create(auth_provider_id="ext-1", email="other@x.com", name="Other")

        self.assertEqual(first.id, second.id)
        self.assertEqual(second.email, "a@x.com")
        self.assertEqual(self.store.user_write_count, 1)

    def test_concurrent_provisioning_converges_on_winner(self) -> None:
        self.store.competing_user_insert = {
            "auth_provider_id": "ext-1",
            "email": "a@x.com",
            "name": "Winner",
        }

        user = self.service.find_or_create(auth_provider_id="ext-1", email="a@x.com", name="Loser")

        self.assertEqual(len(self.store.users), 1)
        winner = next(iter(self.store.users.values()))
        self.assertEqual(user.id, winner.id)
        self.assertEqual(user.name, "Winner")

    def test_concurrent_insert_of_same_email_for_other_identity_is_conflict(self) -> None:
        self.store.competing_user_insert = {
            "auth_provider_id": "ext-other",
            "email": "a@x.com",
            "name": "Other",
        }

        with self.assertRaises(ApiError) as context:
            self.service.find_or_create(auth_provider_id="ext-1", email="a@x.com", name="Ada")

        self.assertEqual(context.exception.status_code, 409)
        self.assertEqual(context.exception.payload.code, "IDENTITY_CONFLICT")
        self.assertEqual(context.exception.payload.details, {"field": "email"})
        self.assertEqual(len(self.store.users), 1)

    def test_email_bound_to_other_identity_is_not_merged(self) -> None:
        existing = self.service.find_or_create(auth_provider_id="ext-a", email="a@x.com", name="A")

        with self.assertRaises(ApiError) as context:
            self.service.find_or_create(auth_provider_id="ext-b", email="a@x.com", name="B")

        self.assertEqual(context.exception.payload.code, "IDENTITY_CONFLICT")
        self.assertEqual(self.store.get_user(existing.id).auth_provider_id, "ext-a")

    def test_create_user_maps_insert_race_to_field_conflict(self) -> None:
        self.store.competing_user_insert = {
            "auth_provider_id": "ext-other",
            "email": "a@x.com",
            "name": "Other",
        }
        payload = CreateUserRequest(email="a@x.com", auth_provider_id="ext-1", name="Ada")

        with self.assertRaises(ApiError) as context:
            self.service.create_user(payload)

        self.assertEqual(context.exception.status_code, 409)
        self.assertEqual(context.exception.payload.code, "EMAIL_ALREADY_EXISTS")

    def test_find_or_create_normalizes_email_domain(self) -> None:
        user = self.service.find_or_create(auth_provider_id="ext-1", email="  Ada@X.COM ", name="Ada")

        self.assertEqual(user.email, "Ada@x.com")
        self.assertEqual(self.store.get_user_by_email("Ada@x.com").id, user.id)
        self.assertEqual(normalize_email("no-at-sign "), "no-at-sign")

    def test_get_user_and_update_profile_report_missing_user(self) -> None:
        with self.assertRaises(ApiError) as get_context:
            self.service.get_user(user_id="missing")
        with self.assertRaises(ApiError) as update_context:
            self.service.update_profile(user_id="missing", oen="1", school_id="s")

        self.assertEqual(get_context.exception.status_code, 404)
        self.assertEqual(update_context.exception.status_code, 404)
        self.assertEqual(self.store.user_write_count, 0)


if __name__ == "__main__":
    unittest.main()
