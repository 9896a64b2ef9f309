"""Response envelope shared by every API route.

Every body has the shape ``{success, data?, message?, pagination?}``.
"""

import logging
from functools import wraps

from fastapi.responses import JSONResponse

from ..errors import GymKeepError
from ..models.common import Page

logger = logging.getLogger(__name__)


def success_response(
    data=None,
    message: str | None = None,
    status_code: int = 200,
    pagination: dict | None = None,
) -> JSONResponse:
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = pagination
    return JSONResponse(body, status_code=status_code)


def page_response(page: Page, serialize=None) -> JSONResponse:
    """Envelope for a list endpoint."""
    serialize = serialize or (lambda item: item.to_dict())
    return success_response(
        [serialize(item) for item in page.items], pagination=page.pagination()
    )


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code)


def handle_errors(failure_message: str):
    """Map service errors to error envelopes.

    Expected errors keep their message and status; anything else is logged
    and answered with a generic 500 carrying ``failure_message``.
    """

    def decorator(endpoint):
        @wraps(endpoint)
        async def wrapper(*args, **kwargs):
            try:
                return await endpoint(*args, **kwargs)
            except GymKeepError as e:
                return error_response(e.message, e.status_code)
            except Exception:
                logger.exception(failure_message)
                return error_response(failure_message, 500)

        return wrapper

    return decorator
