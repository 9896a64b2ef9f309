"""Pytest configuration and fixtures."""

import tempfile
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

import pytest

from gymkeep.db import RoleRepository, init_db
from gymkeep.models.identity import Actor, Gym
from gymkeep.models.marketplace import Product
from gymkeep.models.permissions import STUDENT, TRAINER
from gymkeep.services import (
    AuthService,
    CategoryService,
    GymService,
    ProductService,
    UserService,
)

PASSWORD = "secret123"


@dataclass
class GymWorld:
    """A gym with one account per system role, each already logged in."""

    gym: Gym
    owner: Actor
    trainer: Actor
    student: Actor


async def login(db_path: Path, email: str, gym_id: str | None = None) -> Actor:
    auth = AuthService(db_path)
    session = await auth.login(email, PASSWORD)
    return await auth.authenticate(session["token"], gym_id)


async def build_gym(db_path: Path, slug: str) -> GymWorld:
    gym = await GymService(db_path).create(
        None,
        f"Gym {slug.title()}",
        slug=slug,
        owner={
            "email": f"owner@{slug}.test",
            "password": PASSWORD,
            "first_name": "Olga",
            "last_name": "Owner",
        },
    )
    owner = await login(db_path, f"owner@{slug}.test")

    roles = RoleRepository(db_path)
    users = UserService(db_path)
    trainer_role = await roles.get_by_name(gym.id, TRAINER)
    student_role = await roles.get_by_name(gym.id, STUDENT)
    await users.register(
        owner, f"trainer@{slug}.test", PASSWORD, "Tara", "Trainer", trainer_role.id
    )
    await users.register(
        owner, f"student@{slug}.test", PASSWORD, "Stan", "Student", student_role.id
    )
    return GymWorld(
        gym=gym,
        owner=owner,
        trainer=await login(db_path, f"trainer@{slug}.test"),
        student=await login(db_path, f"student@{slug}.test"),
    )


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
async def db_path(temp_db_path):
    """A temporary database with the schema applied."""
    await init_db(temp_db_path)
    return temp_db_path


@pytest.fixture
async def world(db_path) -> GymWorld:
    return await build_gym(db_path, "iron")


@pytest.fixture
async def other_world(db_path) -> GymWorld:
    return await build_gym(db_path, "steel")


@pytest.fixture
async def super_admin(db_path) -> Actor:
    await UserService(db_path).create_super_admin(
        "root@gymkeep.test", PASSWORD, "Root", "Admin"
    )
    return await login(db_path, "root@gymkeep.test")


@pytest.fixture
async def product(db_path, world) -> Product:
    """Whey protein at 25.00 with 10 in stock."""
    category = await CategoryService(db_path).create(world.owner, "Supplements")
    return await ProductService(db_path).create(
        world.owner, category.id, "Whey Protein", Decimal("25.00"), stock_quantity=10
    )


@pytest.fixture
def password() -> str:
    return PASSWORD


@pytest.fixture
def sign_in(db_path):
    """Log in as any account created by the fixtures."""

    async def _sign_in(email: str, gym_id: str | None = None) -> Actor:
        return await login(db_path, email, gym_id)

    return _sign_in
