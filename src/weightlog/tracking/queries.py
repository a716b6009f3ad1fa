"""Database queries for user profiles and weight samples."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from weightlog.db.connection import DatabaseConnection
from weightlog.exceptions import (
    SampleNotFoundError,
    TransientStoreError,
    UserNotFoundError,
)
from weightlog.tracking.classifier import classify
from weightlog.tracking.models import (
    DateRange,
    TrendClassification,
    UserProfile,
    WeightSample,
    WeightUnit,
)

logger = logging.getLogger(__name__)

_SAMPLE_COLUMNS = "log_id, user_id, measured_at, time_of_day, weight_kg, trend, note"
_USER_COLUMNS = (
    "user_id, name, height_cm, goal_weight_kg, starting_weight_kg, preferred_unit, created_at"
)


def _to_decimal(value: Optional[float]) -> Optional[Decimal]:
    """Read a REAL column back as Decimal without binary float noise."""
    return Decimal(str(value)) if value is not None else None


def _to_real(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _format_time(value: time) -> str:
    return value.replace(microsecond=0).isoformat()


def _row_to_user(row: sqlite3.Row) -> UserProfile:
    return UserProfile(
        user_id=row[0],
        name=row[1],
        height_cm=row[2],
        goal_weight_kg=_to_decimal(row[3]),
        starting_weight_kg=_to_decimal(row[4]),
        preferred_unit=WeightUnit(row[5]),
        created_at=datetime.fromisoformat(row[6]) if row[6] else None,
    )


def _row_to_sample(row: sqlite3.Row) -> WeightSample:
    return WeightSample(
        log_id=row[0],
        user_id=row[1],
        measured_at=date.fromisoformat(row[2]),
        time_of_day=time.fromisoformat(row[3]),
        weight_kg=_to_decimal(row[4]),  # type: ignore[arg-type]
        trend=TrendClassification(row[5]),
        note=row[6],
    )


class UserQueries:
    """Database queries for user profiles."""

    @staticmethod
    def create_user(conn: sqlite3.Connection, profile: UserProfile) -> int:
        """Create a new user profile and return the user_id."""
        cursor = conn.execute(
            """
            INSERT INTO users (name, height_cm, goal_weight_kg,
                               starting_weight_kg, preferred_unit)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                profile.name,
                profile.height_cm,
                _to_real(profile.goal_weight_kg),
                _to_real(profile.starting_weight_kg),
                profile.preferred_unit.value,
            ),
        )
        conn.commit()
        return cursor.lastrowid or 0

    @staticmethod
    def get_user(conn: sqlite3.Connection, user_id: int) -> Optional[UserProfile]:
        """Get user profile by ID."""
        row = conn.execute(
            f"SELECT {_USER_COLUMNS} FROM users WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        return _row_to_user(row) if row is not None else None

    @staticmethod
    def get_default_user(conn: sqlite3.Connection) -> Optional[UserProfile]:
        """Get the first (default) user profile."""
        row = conn.execute(
            f"SELECT {_USER_COLUMNS} FROM users ORDER BY user_id LIMIT 1"
        ).fetchone()
        return _row_to_user(row) if row is not None else None

    @staticmethod
    def update_user(conn: sqlite3.Connection, profile: UserProfile) -> None:
        """Update an existing user profile."""
        if profile.user_id is None:
            raise ValueError("Cannot update profile without user_id")
        if not profile.name or not profile.name.strip():
            raise ValueError("name must not be empty")

        cursor = conn.execute(
            """
            UPDATE users
            SET name = ?, height_cm = ?, goal_weight_kg = ?,
                starting_weight_kg = ?, preferred_unit = ?
            WHERE user_id = ?
            """,
            (
                profile.name,
                profile.height_cm,
                _to_real(profile.goal_weight_kg),
                _to_real(profile.starting_weight_kg),
                profile.preferred_unit.value,
                profile.user_id,
            ),
        )
        if cursor.rowcount == 0:
            raise UserNotFoundError(profile.user_id)
        conn.commit()


class WeightQueries:
    """Database queries for weight samples.

    Writes classify the new weight against the most recent earlier sample
    and store the result in the trend column. Concurrent writers for the
    same user are not serialized: two inserts racing on the same earlier
    sample may both classify against it.
    """

    @staticmethod
    def get_previous_weight(
        conn: sqlite3.Connection, user_id: int, before_date: date
    ) -> Optional[Decimal]:
        """Weight of the latest sample strictly before a date (ties: latest time)."""
        row = conn.execute(
            """
            SELECT weight_kg FROM weight_log
            WHERE user_id = ? AND measured_at < ?
            ORDER BY measured_at DESC, time_of_day DESC LIMIT 1
            """,
            (user_id, before_date.isoformat()),
        ).fetchone()
        return _to_decimal(row[0]) if row else None

    @staticmethod
    def add_weight(
        conn: sqlite3.Connection,
        user_id: int,
        weight_kg: Decimal,
        measured_at: date,
        time_of_day: Optional[time] = None,
        note: Optional[str] = None,
    ) -> WeightSample:
        """
        Add a weight sample, classifying its trend automatically.

        The first sample logged for a user also becomes their starting weight
        if none is set.

        Raises:
            UserNotFoundError: no profile exists for user_id
        """
        profile = UserQueries.get_user(conn, user_id)
        if profile is None:
            raise UserNotFoundError(user_id)

        time_of_day = time_of_day or time(0, 0)
        previous = WeightQueries.get_previous_weight(conn, user_id, measured_at)
        trend = classify(weight_kg, previous)

        cursor = conn.execute(
            """
            INSERT INTO weight_log (user_id, measured_at, time_of_day, weight_kg, trend, note)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                measured_at.isoformat(),
                _format_time(time_of_day),
                float(weight_kg),
                trend.value,
                note,
            ),
        )

        if profile.starting_weight_kg is None:
            profile.starting_weight_kg = weight_kg
            UserQueries.update_user(conn, profile)
            logger.info("Set starting weight for user %s: %skg", user_id, weight_kg)

        conn.commit()
        logger.info(
            "Logged weight for user %s - %skg on %s, trend %s",
            user_id, weight_kg, measured_at, trend.value,
        )

        return WeightSample(
            log_id=cursor.lastrowid,
            user_id=user_id,
            measured_at=measured_at,
            time_of_day=time.fromisoformat(_format_time(time_of_day)),
            weight_kg=weight_kg,
            trend=trend,
            note=note,
        )

    @staticmethod
    def get_sample(conn: sqlite3.Connection, log_id: int) -> Optional[WeightSample]:
        """Get a weight sample by ID."""
        row = conn.execute(
            f"SELECT {_SAMPLE_COLUMNS} FROM weight_log WHERE log_id = ?",
            (log_id,),
        ).fetchone()
        return _row_to_sample(row) if row is not None else None

    @staticmethod
    def update_weight(
        conn: sqlite3.Connection,
        log_id: int,
        weight_kg: Decimal,
        measured_at: Optional[date] = None,
        time_of_day: Optional[time] = None,
        note: Optional[str] = None,
        clear_note: bool = False,
    ) -> WeightSample:
        """
        Update a weight sample and recompute its trend.

        Date, time and note keep their stored values when not given.
        clear_note removes the stored note and takes precedence over note.

        Raises:
            SampleNotFoundError: no sample exists with log_id
        """
        existing = WeightQueries.get_sample(conn, log_id)
        if existing is None:
            raise SampleNotFoundError(log_id)

        measured_at = measured_at or existing.measured_at
        time_of_day = time_of_day or existing.time_of_day
        if clear_note:
            note = None
        elif note is None:
            note = existing.note

        previous = WeightQueries.get_previous_weight(
            conn, existing.user_id, measured_at  # type: ignore[arg-type]
        )
        trend = classify(weight_kg, previous)

        conn.execute(
            """
            UPDATE weight_log
            SET measured_at = ?, time_of_day = ?, weight_kg = ?, trend = ?, note = ?
            WHERE log_id = ?
            """,
            (
                measured_at.isoformat(),
                _format_time(time_of_day),
                float(weight_kg),
                trend.value,
                note,
                log_id,
            ),
        )
        conn.commit()
        logger.info("Updated weight sample %s - %skg, trend %s", log_id, weight_kg, trend.value)

        return WeightSample(
            log_id=log_id,
            user_id=existing.user_id,
            measured_at=measured_at,
            time_of_day=time.fromisoformat(_format_time(time_of_day)),
            weight_kg=weight_kg,
            trend=trend,
            note=note,
        )

    @staticmethod
    def delete_weight(conn: sqlite3.Connection, log_id: int) -> None:
        """Delete a weight sample.

        Raises:
            SampleNotFoundError: no sample exists with log_id
        """
        cursor = conn.execute("DELETE FROM weight_log WHERE log_id = ?", (log_id,))
        if cursor.rowcount == 0:
            raise SampleNotFoundError(log_id)
        conn.commit()
        logger.info("Deleted weight sample %s", log_id)

    @staticmethod
    def get_samples_in_range(
        conn: sqlite3.Connection, user_id: int, date_range: DateRange
    ) -> list[WeightSample]:
        """Samples within an inclusive date range, ordered by date then time."""
        rows = conn.execute(
            f"""
            SELECT {_SAMPLE_COLUMNS} FROM weight_log
            WHERE user_id = ? AND measured_at >= ? AND measured_at <= ?
            ORDER BY measured_at, time_of_day
            """,
            (user_id, date_range.start_date.isoformat(), date_range.end_date.isoformat()),
        ).fetchall()
        return [_row_to_sample(row) for row in rows]

    @staticmethod
    def get_weight_history(
        conn: sqlite3.Connection,
        user_id: int,
        limit: Optional[int] = None,
    ) -> list[WeightSample]:
        """
        Get weight history for a user in chronological order.

        Args:
            user_id: User ID
            limit: If set, return only the most recent N samples
        """
        query = f"""
            SELECT {_SAMPLE_COLUMNS} FROM weight_log
            WHERE user_id = ?
            ORDER BY measured_at DESC, time_of_day DESC
        """
        params: list = [user_id]

        if limit:
            query += " LIMIT ?"
            params.append(limit)

        rows = conn.execute(query, params).fetchall()
        return [_row_to_sample(row) for row in reversed(rows)]


class SqliteSampleStore:
    """SampleStore backed by the weightlog SQLite database.

    Opens one connection per fetch. A locked or unreachable database
    surfaces as TransientStoreError.
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def fetch_samples(self, user_id: int, date_range: DateRange) -> list[WeightSample]:
        try:
            with self.db.get_connection() as conn:
                return WeightQueries.get_samples_in_range(conn, user_id, date_range)
        except sqlite3.OperationalError as exc:
            raise TransientStoreError(f"Could not read weight samples: {exc}") from exc

    def fetch_goal_weight(self, user_id: int) -> Optional[Decimal]:
        try:
            with self.db.get_connection() as conn:
                profile = UserQueries.get_user(conn, user_id)
        except sqlite3.OperationalError as exc:
            raise TransientStoreError(f"Could not read user profile: {exc}") from exc

        if profile is None:
            raise UserNotFoundError(user_id)
        return profile.goal_weight_kg
