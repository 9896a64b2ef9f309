"""Business services for gymkeep."""

from .analytics import AnalyticsService
from .auth import AuthService, hash_password
from .catalog import EquipmentService, ExerciseService
from .gyms import GymService
from .marketplace import CategoryService, ProductService
from .matches import TrainerMatchService
from .orders import OrderService
from .programs import ProgramExerciseService, ProgramService
from .roles import RoleService
from .users import UserService
from .workouts import WorkoutService

__all__ = [
    "AnalyticsService",
    "AuthService",
    "CategoryService",
    "EquipmentService",
    "ExerciseService",
    "GymService",
    "hash_password",
    "OrderService",
    "ProductService",
    "ProgramExerciseService",
    "ProgramService",
    "RoleService",
    "TrainerMatchService",
    "UserService",
    "WorkoutService",
]
