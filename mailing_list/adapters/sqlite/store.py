"""
SQLite Subscription Store.

Implements SubscriptionStorePort on top of the ``subscriptions`` and
``subscription_tokens`` tables (see migrations/).

Uniqueness is enforced by the schema, so two concurrent inserts of the
same email are settled by the database: one commits, the other gets a
UniquenessViolation. Confirmation runs inside an immediate transaction
and only ever moves a row from pending_confirmation to confirmed.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from mailing_list.adapters.clock import SystemClock
from mailing_list.components.subscriptions.models import (
    Confirmation,
    StoreUnavailable,
    Subscriber,
    SubscriptionStatus,
    SubscriptionToken,
    UniquenessViolation,
    UnknownSubscriber,
    UnknownToken,
    can_transition,
)
from mailing_list.core.ports.clock import ClockPort
from mailing_list.domain.subscriber import NewSubscriber

logger = logging.getLogger(__name__)


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def _row_to_subscriber(row: dict[str, Any]) -> Subscriber:
    return Subscriber(
        id=UUID(row["id"]),
        email=row["email"],
        name=row["name"],
        subscribed_at=datetime.fromisoformat(row["subscribed_at"]),
        status=SubscriptionStatus(row["status"]),
    )


class SQLiteSubscriptionStore:
    """Subscription store backed by a SQLite database file."""

    def __init__(
        self,
        db_path: str,
        timeout_seconds: float = 5.0,
        clock: ClockPort | None = None,
    ) -> None:
        self.db_path = db_path
        self.timeout_seconds = timeout_seconds
        self.clock = clock or SystemClock()

    def _get_conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout_seconds)
        except sqlite3.Error as e:
            logger.error("Failed to open database %s: %s", self.db_path, e)
            raise StoreUnavailable(str(e)) from e
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _transaction(self, immediate: bool = False) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, roll back on any error."""
        conn = self._get_conn()
        try:
            if immediate:
                conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    # --- Writes ---

    def insert_subscriber(self, new_subscriber: NewSubscriber) -> UUID:
        subscriber_id = uuid4()
        email = str(new_subscriber.email)
        try:
            with self._transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO subscriptions (id, email, name, subscribed_at, status)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        str(subscriber_id),
                        email,
                        str(new_subscriber.name),
                        self.clock.now().isoformat(),
                        SubscriptionStatus.PENDING_CONFIRMATION.value,
                    ),
                )
        except sqlite3.IntegrityError as e:
            if "subscriptions.email" in str(e):
                logger.warning("Subscriber %s already exists", email)
                raise UniquenessViolation("email", email) from e
            logger.error("Failed to insert subscriber %s: %s", email, e)
            raise StoreUnavailable(str(e)) from e
        except sqlite3.Error as e:
            logger.error("Failed to insert subscriber %s: %s", email, e)
            raise StoreUnavailable(str(e)) from e

        return subscriber_id

    def store_token(self, subscriber_id: UUID, token: str) -> None:
        try:
            with self._transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO subscription_tokens (subscription_token, subscriber_id)
                    VALUES (?, ?)
                    """,
                    (token, str(subscriber_id)),
                )
        except sqlite3.IntegrityError as e:
            message = str(e)
            if "subscription_tokens.subscription_token" in message:
                logger.error("Token collision for subscriber %s", subscriber_id)
                raise UniquenessViolation("subscription_token") from e
            if "FOREIGN KEY" in message:
                logger.error("Cannot store token for unknown subscriber %s", subscriber_id)
                raise UnknownSubscriber(subscriber_id) from e
            logger.error("Failed to store token for subscriber %s: %s", subscriber_id, e)
            raise StoreUnavailable(message) from e
        except sqlite3.Error as e:
            logger.error("Failed to store token for subscriber %s: %s", subscriber_id, e)
            raise StoreUnavailable(str(e)) from e

    def confirm_subscriber(self, token: str) -> Confirmation:
        try:
            with self._transaction(immediate=True) as conn:
                row = conn.execute(
                    """
                    SELECT s.id, s.status
                    FROM subscription_tokens t
                    JOIN subscriptions s ON s.id = t.subscriber_id
                    WHERE t.subscription_token = ?
                    """,
                    (token,),
                ).fetchone()
                if row is None:
                    raise UnknownToken()

                current = SubscriptionStatus(row["status"])
                already_confirmed = not can_transition(current, SubscriptionStatus.CONFIRMED)
                if not already_confirmed:
                    conn.execute(
                        "UPDATE subscriptions SET status = ? WHERE id = ? AND status = ?",
                        (SubscriptionStatus.CONFIRMED.value, row["id"], current.value),
                    )
        except sqlite3.Error as e:
            logger.error("Failed to confirm subscription token: %s", e)
            raise StoreUnavailable(str(e)) from e

        return Confirmation(subscriber_id=UUID(row["id"]), already_confirmed=already_confirmed)

    # --- Reads ---

    def get_subscriber(self, subscriber_id: UUID) -> Subscriber | None:
        return self._fetch_subscriber("SELECT * FROM subscriptions WHERE id = ?", str(subscriber_id))

    def get_subscriber_by_email(self, email: str) -> Subscriber | None:
        return self._fetch_subscriber(
            "SELECT * FROM subscriptions WHERE email = ?", email.strip().lower()
        )

    def list_tokens(self, subscriber_id: UUID) -> list[SubscriptionToken]:
        try:
            with self._transaction() as conn:
                rows = conn.execute(
                    "SELECT subscription_token FROM subscription_tokens WHERE subscriber_id = ?",
                    (str(subscriber_id),),
                ).fetchall()
        except sqlite3.Error as e:
            raise StoreUnavailable(str(e)) from e
        return [SubscriptionToken(r["subscription_token"], subscriber_id) for r in rows]

    def count_subscribers(self) -> int:
        try:
            with self._transaction() as conn:
                row = conn.execute("SELECT COUNT(*) AS n FROM subscriptions").fetchone()
        except sqlite3.Error as e:
            raise StoreUnavailable(str(e)) from e
        return int(row["n"])

    def _fetch_subscriber(self, query: str, param: str) -> Subscriber | None:
        try:
            with self._transaction() as conn:
                row = conn.execute(query, (param,)).fetchone()
        except sqlite3.Error as e:
            raise StoreUnavailable(str(e)) from e
        return _row_to_subscriber(row) if row else None
