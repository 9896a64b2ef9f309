"""Database engine setup and initialization."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from ..config import get_settings

logger = logging.getLogger(__name__)

DB_FILENAME = "gymkeep.db"


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = get_settings().data_dir
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / DB_FILENAME


@asynccontextmanager
async def connect(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    """Open a connection in autocommit mode with row access by name.

    Transactions are opened explicitly with :func:`transaction`.
    """
    async with aiosqlite.connect(db_path, isolation_level=None) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys = ON")
        yield db


@asynccontextmanager
async def transaction(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    """Run a block of writes atomically.

    ``BEGIN IMMEDIATE`` takes the database write lock up front, so a
    check-then-write sequence inside the block cannot interleave with another
    writer. Any exception rolls everything back.
    """
    async with connect(db_path) as db:
        await db.execute("BEGIN IMMEDIATE")
        try:
            yield db
        except BaseException:
            await db.execute("ROLLBACK")
            raise
        else:
            await db.execute("COMMIT")


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS gyms (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        slug TEXT NOT NULL UNIQUE,
        address TEXT,
        contact_phone TEXT,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS roles (
        id TEXT PRIMARY KEY,
        gym_id TEXT REFERENCES gyms(id),
        name TEXT NOT NULL,
        permissions TEXT NOT NULL DEFAULT '{}',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        gym_id TEXT REFERENCES gyms(id),
        role_id TEXT NOT NULL REFERENCES roles(id),
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        phone TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
        token TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id),
        created_at TEXT NOT NULL,
        expires_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS equipment (
        id TEXT PRIMARY KEY,
        gym_id TEXT NOT NULL REFERENCES gyms(id),
        name TEXT NOT NULL,
        description TEXT,
        video_url TEXT,
        status TEXT NOT NULL DEFAULT 'active',
        qr_code_uuid TEXT NOT NULL UNIQUE,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS exercises (
        id TEXT PRIMARY KEY,
        gym_id TEXT NOT NULL REFERENCES gyms(id),
        created_by TEXT REFERENCES users(id),
        name TEXT NOT NULL,
        description TEXT,
        video_url TEXT,
        target_muscle_group TEXT,
        equipment_id TEXT REFERENCES equipment(id),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS workout_programs (
        id TEXT PRIMARY KEY,
        gym_id TEXT NOT NULL REFERENCES gyms(id),
        creator_id TEXT NOT NULL REFERENCES users(id),
        assigned_user_id TEXT REFERENCES users(id),
        name TEXT NOT NULL,
        description TEXT,
        difficulty_level TEXT NOT NULL DEFAULT 'Beginner',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS program_exercises (
        id TEXT PRIMARY KEY,
        program_id TEXT NOT NULL REFERENCES workout_programs(id),
        exercise_id TEXT NOT NULL REFERENCES exercises(id),
        order_index INTEGER NOT NULL CHECK (order_index >= 0),
        sets INTEGER NOT NULL,
        reps TEXT NOT NULL,
        rest_time_seconds INTEGER,
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS workout_logs (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id),
        program_id TEXT NOT NULL REFERENCES workout_programs(id),
        started_at TEXT NOT NULL,
        ended_at TEXT,
        notes TEXT,
        deleted_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS workout_log_entries (
        id TEXT PRIMARY KEY,
        workout_log_id TEXT NOT NULL REFERENCES workout_logs(id),
        exercise_id TEXT NOT NULL REFERENCES exercises(id),
        set_number INTEGER NOT NULL,
        weight_kg REAL,
        reps_completed INTEGER NOT NULL,
        rpe REAL,
        created_at TEXT NOT NULL,
        deleted_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS product_categories (
        id TEXT PRIMARY KEY,
        gym_id TEXT NOT NULL REFERENCES gyms(id),
        name TEXT NOT NULL,
        description TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS products (
        id TEXT PRIMARY KEY,
        gym_id TEXT NOT NULL REFERENCES gyms(id),
        category_id TEXT NOT NULL REFERENCES product_categories(id),
        name TEXT NOT NULL,
        description TEXT,
        image_url TEXT,
        price TEXT NOT NULL,
        stock_quantity INTEGER NOT NULL DEFAULT 0 CHECK (stock_quantity >= 0),
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS orders (
        id TEXT PRIMARY KEY,
        gym_id TEXT NOT NULL REFERENCES gyms(id),
        user_id TEXT NOT NULL REFERENCES users(id),
        order_number TEXT NOT NULL,
        total_amount TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending_approval',
        metadata TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT,
        UNIQUE (gym_id, order_number)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS order_items (
        id TEXT PRIMARY KEY,
        order_id TEXT NOT NULL REFERENCES orders(id),
        product_id TEXT NOT NULL REFERENCES products(id),
        line_number INTEGER NOT NULL,
        quantity INTEGER NOT NULL CHECK (quantity > 0),
        unit_price TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS order_sequences (
        gym_id TEXT NOT NULL REFERENCES gyms(id),
        day TEXT NOT NULL,
        last_value INTEGER NOT NULL,
        PRIMARY KEY (gym_id, day)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS trainer_matches (
        id TEXT PRIMARY KEY,
        gym_id TEXT NOT NULL REFERENCES gyms(id),
        trainer_id TEXT NOT NULL REFERENCES users(id),
        student_id TEXT NOT NULL REFERENCES users(id),
        status TEXT NOT NULL DEFAULT 'active',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        deleted_at TEXT,
        UNIQUE (trainer_id, student_id)
    )
    """,
]

INDEXES = [
    # Live-row uniqueness; soft-deleted rows do not block re-creation
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_roles_gym_name
    ON roles(gym_id, name) WHERE deleted_at IS NULL
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_equipment_gym_name
    ON equipment(gym_id, name) WHERE deleted_at IS NULL
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_exercises_gym_name
    ON exercises(gym_id, name COLLATE NOCASE) WHERE deleted_at IS NULL
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_categories_gym_name
    ON product_categories(gym_id, name) WHERE deleted_at IS NULL
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_products_category_name
    ON products(category_id, name) WHERE deleted_at IS NULL
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_program_exercises_pair
    ON program_exercises(program_id, exercise_id) WHERE deleted_at IS NULL
    """,
    # At most one unfinished workout per user
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_workout_logs_active
    ON workout_logs(user_id) WHERE ended_at IS NULL AND deleted_at IS NULL
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_users_gym ON users(gym_id)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_program_exercises_order
    ON program_exercises(program_id, order_index)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_orders_gym_status ON orders(gym_id, status)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_order_items_order ON order_items(order_id)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id)
    """,
]


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with connect(db_path) as db:
        for statement in SCHEMA + INDEXES:
            await db.execute(statement)
        await db.commit()

    logger.info("Database ready at %s", db_path)
