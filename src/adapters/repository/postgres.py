"""
PostgreSQL repository adapters - Implement the UserDirectory and
PendingRegistrationStore protocols.

This module provides the PostgreSQL implementations of the domain's
persistence ports using psycopg3 with raw SQL.

Concurrency Design:
-------------------
1. **Unique email on accounts**: ``INSERT ... ON CONFLICT (email) DO NOTHING``
   lets the database arbitrate concurrent account creation; the loser sees
   ``EmailAlreadyClaimed``.

2. **Upsert-by-key for pending registrations**: ``INSERT ... ON CONFLICT
   (email) DO UPDATE`` keeps at most one pending row per email. Concurrent
   signups for the same email are last-write-wins.

3. **Delete-as-claim**: ``DELETE`` reports its rowcount, so exactly one of
   several concurrent verifications observes the row and may promote it.

4. **Lockout counter**: a single ``UPDATE ... RETURNING`` increments the
   failure counter and sets ``lock_until`` once the threshold is reached,
   so parallel failed logins cannot skip the lock.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.exceptions import AccountNotFound, EmailAlreadyClaimed
from src.domain.models import Account, PendingRegistration, Profile
from src.domain.passwords import check_password
from src.domain.sessions import utc_now

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = """
    id::text AS id, email, name, country, contact, password_hash,
    email_verified, login_attempts, lock_until, last_login, created_at,
    password_history, password_changed_at
"""


class PostgresUserDirectory:
    """
    Implements UserDirectory protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        max_attempts: int = 5,
        lockout_seconds: int = 7200,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize directory with connection pool and lockout policy.

        Args:
            pool: psycopg3 ConnectionPool for database connections
            max_attempts: Consecutive failed logins that lock the account
            lockout_seconds: How long a lock lasts
            clock: Source of "now" for lock checks
        """
        self._pool = pool
        self._max_attempts = max_attempts
        self._lockout_seconds = lockout_seconds
        self._clock = clock

    def find_by_address(self, email: str) -> Account | None:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = %s"
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return Account(**row) if row is not None else None

    def create(self, email: str, password_hash: str, profile: Profile) -> Account:
        """
        Insert a verified account.

        The UNIQUE constraint on email arbitrates concurrent creation.

        Raises:
            EmailAlreadyClaimed: If the email is already taken
        """
        sql = f"""
            INSERT INTO accounts (email, password_hash, name, country, contact, email_verified)
            VALUES (%s, %s, %s, %s, %s, TRUE)
            ON CONFLICT (email) DO NOTHING
            RETURNING {_ACCOUNT_COLUMNS}
        """
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(
                sql, (email, password_hash, profile.name, profile.country, profile.contact)
            )
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            raise EmailAlreadyClaimed(email)
        return Account(**row)

    def verify_password(self, account: Account, password: str) -> bool:
        return check_password(password, account.password_hash)

    def increment_failed_attempts(self, account: Account) -> None:
        """
        Count a failed login and lock the account at the threshold.

        An expired lock restarts counting from this failure.
        """
        sql = """
            UPDATE accounts
            SET login_attempts = CASE
                    WHEN lock_until IS NOT NULL AND lock_until <= NOW() THEN 1
                    ELSE login_attempts + 1
                END,
                lock_until = CASE
                    WHEN lock_until IS NOT NULL AND lock_until <= NOW() THEN NULL
                    WHEN login_attempts + 1 >= %s THEN NOW() + make_interval(secs => %s::double precision)
                    ELSE lock_until
                END
            WHERE id = %s::uuid
            RETURNING login_attempts, lock_until
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (self._max_attempts, self._lockout_seconds, account.id))
            row = cursor.fetchone()
            conn.commit()

        if row is not None:
            account.login_attempts, account.lock_until = row
            if account.lock_until is not None:
                logger.warning(
                    "Account %s locked after %d failed logins", account.id, account.login_attempts
                )

    def reset_failed_attempts(self, account: Account) -> None:
        sql = """
            UPDATE accounts
            SET login_attempts = 0, lock_until = NULL
            WHERE id = %s::uuid
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (account.id,))
            conn.commit()
        account.login_attempts = 0
        account.lock_until = None

    def is_locked(self, account: Account) -> bool:
        return account.lock_until is not None and account.lock_until > self._clock()

    def record_login(self, account: Account, at: datetime) -> Account:
        sql = f"UPDATE accounts SET last_login = %s WHERE id = %s::uuid RETURNING {_ACCOUNT_COLUMNS}"
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (at, account.id))
            row = cursor.fetchone()
            conn.commit()
        return Account(**row) if row is not None else account

    def update_profile(self, account: Account, profile: Profile) -> Account:
        sql = f"""
            UPDATE accounts
            SET name = %s, country = %s, contact = %s
            WHERE id = %s::uuid
            RETURNING {_ACCOUNT_COLUMNS}
        """
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (profile.name, profile.country, profile.contact, account.id))
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            raise AccountNotFound(account.email)
        return Account(**row)

    def change_password(self, account: Account, password_hash: str, keep_history: int) -> Account:
        """
        Swap in a new hash, push the old one onto the history and unlock.

        Every right-hand side reads the row as it was before the update, so
        the hash appended to the history is the outgoing one.
        """
        sql = f"""
            UPDATE accounts
            SET password_history = CASE
                    WHEN %s::int <= 0 THEN '{{}}'::text[]
                    ELSE (array_append(password_history, password_hash))[
                        GREATEST(cardinality(password_history) + 2 - %s::int, 1):]
                END,
                password_hash = %s,
                password_changed_at = NOW(),
                login_attempts = 0,
                lock_until = NULL
            WHERE id = %s::uuid
            RETURNING {_ACCOUNT_COLUMNS}
        """
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (keep_history, keep_history, password_hash, account.id))
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            raise AccountNotFound(account.email)
        return Account(**row)


class PostgresPendingRegistrationStore:
    """
    Implements PendingRegistrationStore protocol via psycopg3.

    Rows carry a ``purge_after`` deadline derived from the TTL; rows past
    it are treated as absent and deleted when read.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def get(self, email: str) -> PendingRegistration | None:
        purge_sql = "DELETE FROM pending_registrations WHERE email = %s AND purge_after <= NOW()"
        select_sql = """
            SELECT email, code, name, country, contact, password_hash,
                   issued_at, expires_at, last_resend_at
            FROM pending_registrations
            WHERE email = %s
        """
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(purge_sql, (email,))
            cursor.execute(select_sql, (email,))
            row = cursor.fetchone()
            conn.commit()

        return _pending_from_row(row) if row is not None else None

    def put(self, record: PendingRegistration, ttl_seconds: int) -> None:
        sql = """
            INSERT INTO pending_registrations
                (email, code, name, country, contact, password_hash,
                 issued_at, expires_at, last_resend_at, purge_after)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, NOW() + make_interval(secs => %s::double precision))
            ON CONFLICT (email) DO UPDATE
            SET code = EXCLUDED.code,
                name = EXCLUDED.name,
                country = EXCLUDED.country,
                contact = EXCLUDED.contact,
                password_hash = EXCLUDED.password_hash,
                issued_at = EXCLUDED.issued_at,
                expires_at = EXCLUDED.expires_at,
                last_resend_at = EXCLUDED.last_resend_at,
                purge_after = EXCLUDED.purge_after
        """
        params: tuple[Any, ...] = (
            record.email,
            record.code,
            record.profile.name,
            record.profile.country,
            record.profile.contact,
            record.password_hash,
            record.issued_at,
            record.expires_at,
            record.last_resend_at,
            ttl_seconds,
        )
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            conn.commit()

    def delete(self, email: str) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM pending_registrations WHERE email = %s", (email,))
            conn.commit()
            return cursor.rowcount == 1


def _pending_from_row(row: dict[str, Any]) -> PendingRegistration:
    return PendingRegistration(
        email=row["email"],
        code=row["code"],
        profile=Profile(name=row["name"], country=row["country"], contact=row["contact"]),
        password_hash=row["password_hash"],
        issued_at=row["issued_at"],
        expires_at=row["expires_at"],
        last_resend_at=row["last_resend_at"],
    )


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
