"""
Notification signups for upcoming premium features
"""

import logging
import sqlite3
import time
from dataclasses import dataclass, field
from pathlib import Path

from qrthis.errors import DuplicateSignupError, RateLimitExceeded, SignupValidationError
from qrthis.storage import LocalStore
from qrthis.validation import (
    ONE_DAY,
    is_rate_limited,
    validate_name,
    validate_signup_email,
    validate_signup_phone,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "qrthis-cli"


@dataclass
class NotificationSignup:
    email: str
    feature_requested: str
    name: str | None = None
    phone_number: str | None = None
    user_agent: str | None = None
    created_at: float = field(default_factory=time.time)
    id: int | None = None


class SignupStore:
    """Insert-only SQLite table of signups.

    An email may ask about the same feature once per day and make at most
    ``max_daily_signups`` signups in total per day.
    """

    def __init__(self, db_path: str | Path, max_daily_signups: int = 3):
        self.db_path = str(db_path)
        self.max_daily_signups = max_daily_signups
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._create_tables()

    def _create_tables(self):
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS qrthis_notifications (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                email TEXT NOT NULL,
                name TEXT,
                phone_number TEXT,
                feature_requested TEXT NOT NULL,
                user_agent TEXT,
                created_at REAL NOT NULL,
                updated_at REAL NOT NULL
            )
            """
        )
        self.conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_notifications_email "
            "ON qrthis_notifications (email, created_at)"
        )
        self.conn.commit()

    def insert(self, signup: NotificationSignup) -> NotificationSignup:
        since = signup.created_at - ONE_DAY

        duplicate = self.conn.execute(
            "SELECT 1 FROM qrthis_notifications "
            "WHERE email = ? AND feature_requested = ? AND created_at > ?",
            (signup.email, signup.feature_requested, since),
        ).fetchone()
        if duplicate:
            raise DuplicateSignupError("Duplicate notification request")

        (recent,) = self.conn.execute(
            "SELECT COUNT(*) FROM qrthis_notifications WHERE email = ? AND created_at > ?",
            (signup.email, since),
        ).fetchone()
        if recent >= self.max_daily_signups:
            raise RateLimitExceeded("Rate limit exceeded")

        cursor = self.conn.execute(
            "INSERT INTO qrthis_notifications "
            "(email, name, phone_number, feature_requested, user_agent, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                signup.email,
                signup.name,
                signup.phone_number,
                signup.feature_requested,
                signup.user_agent,
                signup.created_at,
                signup.created_at,
            ),
        )
        self.conn.commit()
        signup.id = cursor.lastrowid
        logger.info("Recorded signup #%s for feature '%s'", signup.id, signup.feature_requested)
        return signup

    def list_for_feature(self, feature: str) -> list[NotificationSignup]:
        rows = self.conn.execute(
            "SELECT id, email, name, phone_number, feature_requested, user_agent, created_at "
            "FROM qrthis_notifications WHERE feature_requested = ? ORDER BY created_at",
            (feature,),
        ).fetchall()
        return [NotificationSignup(**dict(row)) for row in rows]

    def close(self):
        self.conn.close()


def submit_signup(
    store: SignupStore,
    local_store: LocalStore,
    email: str,
    feature: str,
    name: str | None = None,
    phone: str | None = None,
    user_agent: str = DEFAULT_USER_AGENT,
    max_daily_requests: int = 3,
    now: float | None = None,
) -> NotificationSignup:
    """Validate a signup form, apply the local rate limit and record it.

    Raises:
        SignupValidationError: With a message per invalid field.
        RateLimitExceeded: The email already made its requests for today.
        DuplicateSignupError: Same email and feature within the last day.
    """
    now = time.time() if now is None else now
    errors = {}

    email_result = validate_signup_email(email)
    if not email_result.is_valid:
        errors["email"] = email_result.error or "Invalid email"

    phone_result = validate_signup_phone(phone)
    if phone and phone.strip() and not phone_result.is_valid:
        errors["phone"] = phone_result.error or "Invalid phone number"

    name_result = validate_name(name)
    if name and name.strip() and not name_result.is_valid:
        errors["name"] = name_result.error or "Invalid name"

    if not feature or not feature.strip():
        errors["feature"] = "Feature is required"

    if errors:
        raise SignupValidationError(errors)

    rate_key = f"notification_{email.lower().strip()}"
    if is_rate_limited(local_store, rate_key, max_daily_requests, now=now):
        raise RateLimitExceeded(
            f"You can only make {max_daily_requests} requests per day. Please try again later."
        )

    return store.insert(
        NotificationSignup(
            email=email_result.sanitized,
            feature_requested=feature.strip(),
            name=name_result.sanitized or None,
            phone_number=phone_result.sanitized or None,
            user_agent=user_agent,
            created_at=now,
        )
    )
