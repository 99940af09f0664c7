"""
PostgreSQL repository adapter - Implements UserRepository protocol.

This module provides the PostgreSQL implementation of the domain's
credential store port using psycopg3 with raw SQL.

Uniqueness
----------
The users table carries UNIQUE constraints on login and email
(users_login_key, users_email_key). The domain checks for duplicates
before inserting, but two concurrent registrations can both pass that
check; the constraint rejects the second insert and the violation is
mapped back to DuplicateLogin/DuplicateEmail by constraint name.

Failures
--------
Connection failures and pool timeouts surface as StoreUnavailable.
Nothing is retried here.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool, PoolTimeout

from src.domain.exceptions import DuplicateEmail, DuplicateLogin, StoreUnavailable
from src.domain.ports import User

logger = logging.getLogger(__name__)

_COLUMNS = """
    login, email, password_hash, first_name, last_name, image_url, lang_key,
    activated, activation_key, reset_key, reset_date, created_date, ip_address,
    authorities
"""

_SELECT_SQL = f"SELECT {_COLUMNS} FROM users"


def _row_to_user(row: tuple) -> User:
    return User(
        login=row[0],
        email=row[1],
        password_hash=row[2],
        first_name=row[3],
        last_name=row[4],
        image_url=row[5],
        lang_key=row[6],
        activated=row[7],
        activation_key=row[8],
        reset_key=row[9],
        reset_date=row[10],
        created_date=row[11],
        ip_address=row[12],
        authorities=list(row[13] or []),
    )


def _duplicate_error(exc: errors.UniqueViolation, user: User) -> Exception:
    constraint = exc.diag.constraint_name or ""
    if "email" in constraint:
        return DuplicateEmail(user.email)
    return DuplicateLogin(user.login)


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    @contextmanager
    def _connection(self) -> Iterator[psycopg.Connection]:
        try:
            with self._pool.connection() as conn:
                yield conn
        except (psycopg.OperationalError, PoolTimeout) as e:
            logger.error("Credential store unavailable: %s", e)
            raise StoreUnavailable(str(e)) from e

    def _find_one(self, where: str, value: str) -> User | None:
        with self._connection() as conn:
            row = conn.execute(f"{_SELECT_SQL} WHERE {where} = %s", (value,)).fetchone()
        return _row_to_user(row) if row is not None else None

    def find_by_login(self, login: str) -> User | None:
        return self._find_one("login", login)

    def find_by_email(self, email: str) -> User | None:
        return self._find_one("email", email)

    def find_by_activation_key(self, key: str) -> User | None:
        return self._find_one("activation_key", key)

    def find_by_reset_key(self, key: str) -> User | None:
        return self._find_one("reset_key", key)

    def count_by_ip_address_created_between(
        self, ip_address: str, start: datetime, end: datetime
    ) -> int:
        sql = """
            SELECT COUNT(*) FROM users
            WHERE ip_address = %s
              AND created_date BETWEEN %s AND %s
        """
        with self._connection() as conn:
            row = conn.execute(sql, (ip_address, start, end)).fetchone()
        return row[0]

    def create(self, user: User) -> User:
        """
        Insert a new user row.

        Raises:
            DuplicateLogin: On users_login_key violation
            DuplicateEmail: On users_email_key violation
        """
        sql = f"""
            INSERT INTO users ({_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        """
        params = (
            user.login,
            user.email,
            user.password_hash,
            user.first_name,
            user.last_name,
            user.image_url,
            user.lang_key,
            user.activated,
            user.activation_key,
            user.reset_key,
            user.reset_date,
            user.created_date,
            user.ip_address,
            user.authorities,
        )
        try:
            with self._connection() as conn:
                conn.execute(sql, params)
                conn.commit()
        except errors.UniqueViolation as e:
            raise _duplicate_error(e, user) from e
        return user

    def save(self, user: User) -> User:
        """
        Update the mutable columns of an existing user.

        login, created_date, ip_address and authorities are immutable.

        Raises:
            DuplicateEmail: If the new email is used by another row
        """
        sql = """
            UPDATE users
            SET email = %s,
                password_hash = %s,
                first_name = %s,
                last_name = %s,
                image_url = %s,
                lang_key = %s,
                activated = %s,
                activation_key = %s,
                reset_key = %s,
                reset_date = %s
            WHERE login = %s
        """
        params = (
            user.email,
            user.password_hash,
            user.first_name,
            user.last_name,
            user.image_url,
            user.lang_key,
            user.activated,
            user.activation_key,
            user.reset_key,
            user.reset_date,
            user.login,
        )
        try:
            with self._connection() as conn:
                conn.execute(sql, params)
                conn.commit()
        except errors.UniqueViolation as e:
            raise _duplicate_error(e, user) from e
        return user

    def ping(self) -> None:
        """Check store connectivity."""
        with self._connection() as conn:
            conn.execute("SELECT 1")


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
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
