"""Repository classes for database operations."""

from .analytics import AnalyticsRepository
from .catalog import EquipmentRepository, ExerciseRepository
from .identity import GymRepository, RoleRepository, SessionRepository, UserRepository
from .marketplace import CategoryRepository, OrderRepository, ProductRepository
from .matches import TrainerMatchRepository
from .programs import ProgramExerciseRepository, ProgramRepository
from .workouts import WorkoutLogEntryRepository, WorkoutLogRepository

__all__ = [
    "AnalyticsRepository",
    "CategoryRepository",
    "EquipmentRepository",
    "ExerciseRepository",
    "GymRepository",
    "OrderRepository",
    "ProductRepository",
    "ProgramExerciseRepository",
    "ProgramRepository",
    "RoleRepository",
    "SessionRepository",
    "TrainerMatchRepository",
    "UserRepository",
    "WorkoutLogEntryRepository",
    "WorkoutLogRepository",
]
