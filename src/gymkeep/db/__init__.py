"""Database layer for gymkeep."""

from .engine import connect, get_db_path, init_db, transaction
from .repositories import (
    AnalyticsRepository,
    CategoryRepository,
    EquipmentRepository,
    ExerciseRepository,
    GymRepository,
    OrderRepository,
    ProductRepository,
    ProgramExerciseRepository,
    ProgramRepository,
    RoleRepository,
    SessionRepository,
    TrainerMatchRepository,
    UserRepository,
    WorkoutLogEntryRepository,
    WorkoutLogRepository,
)

__all__ = [
    "AnalyticsRepository",
    "CategoryRepository",
    "connect",
    "EquipmentRepository",
    "ExerciseRepository",
    "get_db_path",
    "GymRepository",
    "init_db",
    "OrderRepository",
    "ProductRepository",
    "ProgramExerciseRepository",
    "ProgramRepository",
    "RoleRepository",
    "SessionRepository",
    "TrainerMatchRepository",
    "transaction",
    "UserRepository",
    "WorkoutLogEntryRepository",
    "WorkoutLogRepository",
]
