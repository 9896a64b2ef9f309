"""Tenant administration commands."""

from decimal import Decimal

import click

from ..db import GymRepository, RoleRepository, UserRepository
from ..models.identity import Actor
from ..models.marketplace import OrderLine
from ..models.permissions import GYM_OWNER, STUDENT, TRAINER
from ..services import (
    CategoryService,
    EquipmentService,
    ExerciseService,
    GymService,
    OrderService,
    ProductService,
    ProgramExerciseService,
    ProgramService,
    TrainerMatchService,
    UserService,
)
from .base import async_command, echo_info, echo_success, ensure_initialized, format_table


@click.command("create-superadmin")
@click.option("--email", required=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--first-name", default="Super")
@click.option("--last-name", default="Admin")
@click.pass_context
@async_command
async def create_superadmin(ctx, email, password, first_name, last_name):
    """Create a cross-tenant administrator account."""
    ensure_initialized(ctx)
    user = await UserService().create_super_admin(email, password, first_name, last_name)
    echo_success(f"Super admin {user.email} created ({user.id})")


@click.command("create-gym")
@click.argument("name")
@click.option("--slug", help="URL slug (derived from the name by default)")
@click.option("--address")
@click.option("--phone", "contact_phone")
@click.option("--owner-email", help="Also create a GymOwner with this email")
@click.option("--owner-password")
@click.option("--owner-first-name", default="Gym")
@click.option("--owner-last-name", default="Owner")
@click.pass_context
@async_command
async def create_gym(
    ctx,
    name,
    slug,
    address,
    contact_phone,
    owner_email,
    owner_password,
    owner_first_name,
    owner_last_name,
):
    """Create a gym with its default roles and, optionally, its owner."""
    ensure_initialized(ctx)
    owner = None
    if owner_email:
        owner = {
            "email": owner_email,
            "password": owner_password
            or click.prompt("Owner password", hide_input=True, confirmation_prompt=True),
            "first_name": owner_first_name,
            "last_name": owner_last_name,
        }
    gym = await GymService().create(
        None, name, slug=slug, address=address, contact_phone=contact_phone, owner=owner
    )
    echo_success(f"Gym {gym.name} created with slug {gym.slug} ({gym.id})")
    if owner:
        echo_info(f"Owner account: {owner_email}")


@click.command("list-gyms")
@click.pass_context
@async_command
async def list_gyms(ctx):
    """List all gyms."""
    ensure_initialized(ctx)
    page = await GymRepository().list_page(1, 1000)
    if not page.items:
        echo_info("No gyms yet")
        return
    click.echo(
        format_table(
            ["ID", "Name", "Slug", "Active"],
            [[g.id, g.name, g.slug, "yes" if g.is_active else "no"] for g in page.items],
        )
    )


async def _actor_for(user, gym_id: str, role_name: str) -> Actor:
    role = await RoleRepository().get_by_name(gym_id, role_name)
    return Actor(
        user_id=user.id,
        gym_id=gym_id,
        role_id=role.id,
        role_name=role.name,
        permissions=role.permissions,
    )


@click.command("seed-demo")
@click.option("--password", default="demo1234", show_default=True)
@click.pass_context
@async_command
async def seed_demo(ctx, password):
    """Create a demo gym with staff, a program and a stocked shop."""
    ensure_initialized(ctx)
    gym = await GymService().create(
        None,
        "Demo Gym",
        owner={
            "email": "owner@demo.gym",
            "password": password,
            "first_name": "Olivia",
            "last_name": "Owner",
        },
    )
    users = UserService()
    owner_user = await UserRepository().get_by_email("owner@demo.gym")
    owner = await _actor_for(owner_user, gym.id, GYM_OWNER)

    roles = RoleRepository()
    trainer_role = await roles.get_by_name(gym.id, TRAINER)
    student_role = await roles.get_by_name(gym.id, STUDENT)
    trainer_user = await users.register(
        owner, "trainer@demo.gym", password, "Tom", "Trainer", trainer_role.id
    )
    student_user = await users.register(
        owner, "student@demo.gym", password, "Sam", "Student", student_role.id
    )
    await TrainerMatchService().create(owner, trainer_user.id, student_user.id)

    rack = await EquipmentService().create(owner, "Squat Rack")
    exercises = ExerciseService()
    squat = await exercises.create(
        owner, "Back Squat", target_muscle_group="Legs", equipment_id=rack.id
    )
    pushup = await exercises.create(owner, "Push-up", target_muscle_group="Chest")
    plank = await exercises.create(owner, "Plank", target_muscle_group="Core")

    program = await ProgramService().create(
        owner, "Full Body Basics", assigned_user_id=student_user.id
    )
    slots = ProgramExerciseService()
    for exercise, reps in ((squat, "5"), (pushup, "10-12"), (plank, "45s")):
        await slots.add(owner, program.id, exercise.id, sets=3, reps=reps)

    category = await CategoryService().create(owner, "Supplements")
    products = ProductService()
    protein = await products.create(
        owner, category.id, "Whey Protein", Decimal("25.00"), stock_quantity=10
    )
    await products.create(owner, category.id, "Shaker Bottle", Decimal("8.50"), stock_quantity=30)

    student = await _actor_for(student_user, gym.id, STUDENT)
    order = await OrderService().create(student, [OrderLine(protein.id, 2)])

    echo_success(f"Demo gym created ({gym.id})")
    click.echo(
        format_table(
            ["Account", "Role"],
            [
                ["owner@demo.gym", GYM_OWNER],
                ["trainer@demo.gym", TRAINER],
                ["student@demo.gym", STUDENT],
            ],
        )
    )
    echo_info(f"Password for all demo accounts: {password}")
    echo_info(f"Sample order {order.order_number} is pending approval")
