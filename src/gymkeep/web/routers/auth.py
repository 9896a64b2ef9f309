"""Login, logout and the current user."""

from fastapi import APIRouter, Depends

from ...models.identity import Actor
from ...services import AuthService
from ..deps import current_actor, current_token
from ..responses import handle_errors, success_response
from ..schemas import LoginRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
@handle_errors("Failed to log in")
async def login(body: LoginRequest):
    """Exchange credentials for a bearer token."""
    session = await AuthService().login(body.email, body.password)
    return success_response(session, message="Login successful")


@router.post("/logout")
@handle_errors("Failed to log out")
async def logout(token: str = Depends(current_token)):
    await AuthService().logout(token)
    return success_response(message="Logged out")


@router.get("/me")
@handle_errors("Failed to fetch current user")
async def me(actor: Actor = Depends(current_actor)):
    return success_response(await AuthService().me(actor))
