"""Data models for gymkeep."""

from .catalog import Equipment, EquipmentStatus, Exercise
from .common import Page
from .identity import Actor, Gym, Role, User
from .marketplace import (
    Order,
    OrderItem,
    OrderLine,
    OrderStatus,
    Product,
    ProductCategory,
)
from .permissions import Action, PermissionSet, Resource
from .program import DifficultyLevel, ProgramExercise, WorkoutProgram
from .trainer_match import MatchStatus, TrainerMatch
from .workout_log import WorkoutLog, WorkoutLogEntry

__all__ = [
    "Action",
    "Actor",
    "DifficultyLevel",
    "Equipment",
    "EquipmentStatus",
    "Exercise",
    "Gym",
    "MatchStatus",
    "Order",
    "OrderItem",
    "OrderLine",
    "OrderStatus",
    "Page",
    "PermissionSet",
    "Product",
    "ProductCategory",
    "ProgramExercise",
    "Resource",
    "Role",
    "TrainerMatch",
    "User",
    "WorkoutLog",
    "WorkoutLogEntry",
    "WorkoutProgram",
]
