"""
HTTP tests for the subscription endpoints.

End-to-end flow through FastAPI with a real SQLite store and the dev
email adapter.
"""

import logging
import re
import sqlite3
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from mailing_list.adapters.dev_email import DevEmailAdapter
from mailing_list.adapters.sqlite.store import SQLiteSubscriptionStore
from mailing_list.api.deps import (
    get_email_adapter,
    get_settings,
    get_subscription_store,
)
from mailing_list.api.main import app
from mailing_list.components.subscriptions import SubscriptionStatus
from mailing_list.domain import MAX_EMAIL_LENGTH
from mailing_list.settings import Settings

BASE_URL = "http://test.local"
LINK_RE = re.compile(
    re.escape(BASE_URL) + r"/subscriptions/confirm\?subscription_token=([A-Za-z0-9]{25})"
)


@pytest.fixture
def email_adapter() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def test_settings(migrated_db_path) -> Settings:
    return Settings.model_validate(
        {
            "application": {"base_url": BASE_URL},
            "database": {"path": migrated_db_path},
        }
    )


@pytest.fixture
def client(
    store: SQLiteSubscriptionStore,
    email_adapter: DevEmailAdapter,
    test_settings: Settings,
) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_subscription_store] = lambda: store
    app.dependency_overrides[get_email_adapter] = lambda: email_adapter

    yield TestClient(app)

    app.dependency_overrides.clear()


def count_rows(db_path: str, table: str) -> int:
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()


def subscribe_ursula(client: TestClient, **overrides):
    data = {"name": "Ursula Le Guin", "email": "ursula@example.com", **overrides}
    return client.post("/subscriptions", data=data)


def captured_token(email_adapter: DevEmailAdapter) -> str:
    email = email_adapter.get_last_email()
    assert email is not None
    match = LINK_RE.search(email.body_text)
    assert match, email.body_text
    return match.group(1)


class TestSubscribe:
    def test_valid_form_returns_200(self, client, store, email_adapter, migrated_db_path) -> None:
        response = subscribe_ursula(client)

        assert response.status_code == 200
        subscriber = store.get_subscriber_by_email("ursula@example.com")
        assert subscriber is not None
        assert subscriber.status == SubscriptionStatus.PENDING_CONFIRMATION
        assert count_rows(migrated_db_path, "subscriptions") == 1
        assert count_rows(migrated_db_path, "subscription_tokens") == 1

    def test_sends_one_email_with_link(self, client, store, email_adapter) -> None:
        subscribe_ursula(client)

        assert email_adapter.email_count == 1
        sent = email_adapter.get_last_email()
        assert sent.recipient == "ursula@example.com"
        assert LINK_RE.search(sent.body_html)

        token = captured_token(email_adapter)
        subscriber = store.get_subscriber_by_email("ursula@example.com")
        assert [t.subscription_token for t in store.list_tokens(subscriber.id)] == [token]

    @pytest.mark.parametrize(
        "data",
        [
            {"name": "Ursula Le Guin", "email": "not-an-email"},
            {"name": "", "email": "ursula@example.com"},
            {"name": "Ursula Le Guin"},
            {"email": "ursula@example.com"},
            {},
        ],
    )
    def test_invalid_form_returns_400_without_writes(
        self, client, email_adapter, migrated_db_path, data
    ) -> None:
        response = client.post("/subscriptions", data=data)

        assert response.status_code == 400
        assert count_rows(migrated_db_path, "subscriptions") == 0
        assert count_rows(migrated_db_path, "subscription_tokens") == 0
        assert email_adapter.email_count == 0

    def test_duplicate_email_returns_409(self, client, migrated_db_path) -> None:
        subscribe_ursula(client)

        response = subscribe_ursula(client, email="URSULA@example.com")

        assert response.status_code == 409
        assert count_rows(migrated_db_path, "subscriptions") == 1

    def test_email_failure_returns_500_and_keeps_rows(
        self, client, email_adapter, migrated_db_path
    ) -> None:
        email_adapter.fail_with = "provider down"

        response = subscribe_ursula(client)

        assert response.status_code == 500
        assert "provider down" not in response.text
        assert count_rows(migrated_db_path, "subscriptions") == 1
        assert count_rows(migrated_db_path, "subscription_tokens") == 1

    def test_oversized_email_is_clipped_in_logs(self, client, caplog) -> None:
        huge = "a" * 10_000 + "@example.com"

        with caplog.at_level(logging.INFO, logger="mailing_list"):
            response = subscribe_ursula(client, email=huge)

        assert response.status_code == 400
        logged = [r for r in caplog.records if hasattr(r, "subscriber_email")]
        assert logged
        for record in logged:
            assert len(record.subscriber_email) <= MAX_EMAIL_LENGTH + 3
        assert all(huge not in r.getMessage() for r in caplog.records)

    def test_store_failure_returns_500(self, client, db_path, email_adapter) -> None:
        # Database without schema
        app.dependency_overrides[get_subscription_store] = lambda: SQLiteSubscriptionStore(
            db_path + ".empty"
        )

        response = subscribe_ursula(client)

        assert response.status_code == 500
        assert email_adapter.email_count == 0


class TestConfirm:
    def test_confirm_captured_token(self, client, store, email_adapter) -> None:
        subscribe_ursula(client)
        token = captured_token(email_adapter)

        response = client.get("/subscriptions/confirm", params={"subscription_token": token})

        assert response.status_code == 200
        subscriber = store.get_subscriber_by_email("ursula@example.com")
        assert subscriber.status == SubscriptionStatus.CONFIRMED

    def test_confirm_twice_is_ok(self, client, store, email_adapter) -> None:
        subscribe_ursula(client)
        token = captured_token(email_adapter)
        client.get("/subscriptions/confirm", params={"subscription_token": token})

        response = client.get("/subscriptions/confirm", params={"subscription_token": token})

        assert response.status_code == 200
        assert "already" in response.json()["message"]
        subscriber = store.get_subscriber_by_email("ursula@example.com")
        assert subscriber.status == SubscriptionStatus.CONFIRMED

    def test_unknown_token_returns_401(self, client, store, email_adapter) -> None:
        subscribe_ursula(client)

        response = client.get(
            "/subscriptions/confirm", params={"subscription_token": "x" * 25}
        )

        assert response.status_code == 401
        subscriber = store.get_subscriber_by_email("ursula@example.com")
        assert subscriber.status == SubscriptionStatus.PENDING_CONFIRMATION

    def test_missing_token_returns_400(self, client) -> None:
        response = client.get("/subscriptions/confirm")
        assert response.status_code == 400

    def test_store_failure_returns_500(self, client, db_path) -> None:
        app.dependency_overrides[get_subscription_store] = lambda: SQLiteSubscriptionStore(
            db_path + ".empty"
        )

        response = client.get("/subscriptions/confirm", params={"subscription_token": "x" * 25})

        assert response.status_code == 500


class TestShell:
    def test_health_check(self, client) -> None:
        response = client.get("/health_check")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_request_id_header(self, client) -> None:
        response = client.get("/health_check", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated(self, client) -> None:
        response = client.get("/health_check")
        assert response.headers["X-Request-ID"]

    @pytest.mark.parametrize("incoming", ["x" * 65, "<script>", "a b", "req_1"])
    def test_unsafe_request_id_replaced(self, client, incoming) -> None:
        response = client.get("/health_check", headers={"X-Request-ID": incoming})
        assert response.headers["X-Request-ID"] != incoming
        assert re.fullmatch(r"[0-9a-f-]{36}", response.headers["X-Request-ID"])
