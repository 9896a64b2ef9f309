"""Request bodies accepted by the API.

Fields are snake_case in Python and camelCase on the wire.
"""

from decimal import Decimal
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Optional in a partial update, but never cleared once set
    not_null: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_cleared_fields(self):
        for name in self.not_null:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields the client actually sent, for partial updates."""
        return self.model_dump(exclude_unset=True)


# Auth and identity


class LoginRequest(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)


class OwnerCreate(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    phone: Optional[str] = None


class GymCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = None
    address: Optional[str] = None
    contact_phone: Optional[str] = None
    owner: Optional[OwnerCreate] = None


class GymUpdate(CamelModel):
    not_null = ("name", "slug")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = None
    address: Optional[str] = None
    contact_phone: Optional[str] = None


class UserCreate(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    role_id: str
    phone: Optional[str] = None


class UserUpdate(CamelModel):
    not_null = ("email", "first_name", "last_name", "role_id")

    email: Optional[str] = Field(None, min_length=3, max_length=255)
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    role_id: Optional[str] = None


class PasswordChange(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str


class RoleCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    permissions: dict = Field(default_factory=dict)


class RoleUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    permissions: Optional[dict] = None


class RoleFromTemplate(CamelModel):
    template_name: str
    custom_name: Optional[str] = None


# Catalog


class EquipmentCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    video_url: Optional[str] = None
    status: Optional[str] = None


class EquipmentUpdate(CamelModel):
    not_null = ("name", "status")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    video_url: Optional[str] = None
    status: Optional[str] = None


class ExerciseCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    video_url: Optional[str] = None
    target_muscle_group: Optional[str] = None
    equipment_id: Optional[str] = None


class ExerciseUpdate(CamelModel):
    not_null = ("name",)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    video_url: Optional[str] = None
    target_muscle_group: Optional[str] = None
    equipment_id: Optional[str] = None


# Programs


class ProgramCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    difficulty_level: Optional[str] = None
    assigned_user_id: Optional[str] = None


class ProgramUpdate(CamelModel):
    not_null = ("name", "difficulty_level")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    difficulty_level: Optional[str] = None
    assigned_user_id: Optional[str] = None


class ProgramClone(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    assigned_user_id: Optional[str] = None


class ProgramExerciseCreate(CamelModel):
    exercise_id: str
    sets: int = Field(ge=1)
    reps: str = Field(min_length=1, max_length=50)
    rest_time_seconds: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)


class ProgramExerciseUpdate(CamelModel):
    not_null = ("sets", "reps", "order_index")

    sets: Optional[int] = Field(None, ge=1)
    reps: Optional[str] = Field(None, min_length=1, max_length=50)
    rest_time_seconds: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)


class ExerciseOrder(CamelModel):
    id: str
    order_index: int = Field(ge=0)


class ReorderRequest(CamelModel):
    exercise_orders: list[ExerciseOrder] = Field(min_length=1)


# Workout logs


class WorkoutStart(CamelModel):
    program_id: str
    notes: Optional[str] = None


class WorkoutEnd(CamelModel):
    notes: Optional[str] = None


class SetCreate(CamelModel):
    exercise_id: str
    set_number: int = Field(ge=1)
    reps_completed: int = Field(ge=0)
    weight_kg: Optional[float] = Field(None, ge=0)
    rpe: Optional[float] = Field(None, ge=1, le=10)


class SetUpdate(CamelModel):
    not_null = ("reps_completed",)

    reps_completed: Optional[int] = Field(None, ge=0)
    weight_kg: Optional[float] = Field(None, ge=0)
    rpe: Optional[float] = Field(None, ge=1, le=10)


# Marketplace


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


class CategoryUpdate(CamelModel):
    not_null = ("name",)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None


class ProductCreate(CamelModel):
    category_id: str
    name: str = Field(min_length=1, max_length=255)
    price: Decimal
    stock_quantity: int = 0
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True


class ProductUpdate(CamelModel):
    not_null = ("category_id", "name", "price", "stock_quantity", "is_active")

    category_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = None
    stock_quantity: Optional[int] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None


class StockUpdate(CamelModel):
    stock_quantity: int


class OrderItemRequest(CamelModel):
    product_id: str
    quantity: int


class OrderCreate(CamelModel):
    items: list[OrderItemRequest]
    user_id: Optional[str] = None
    metadata: Optional[dict] = None


class OrderStatusUpdate(CamelModel):
    status: str
    metadata: Optional[dict] = None


# Trainer matches


class MatchCreate(CamelModel):
    trainer_id: str
    student_id: str


class MatchStatusUpdate(CamelModel):
    status: str
