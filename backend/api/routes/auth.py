"""
Auth endpoint.

One POST endpoint; the `action` field in the JSON body selects the
operation. See api.dispatch for the action table. A GET endpoint
serves the landing page for email verification links.
"""

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from modules.mail import verification_page

from ..dependencies import get_request_router
from ..dispatch import RequestRouter
from ..models.errors import ErrorResponse

router = APIRouter()

ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 500)}

# Landing page copy per verification outcome: (title, message, success)
VERIFICATION_PAGES = {
    "verified": (
        "Email verified!",
        "Your email address has been confirmed. You can now sign in to CuraFlow.",
        True,
    ),
    "already_verified": (
        "Already verified",
        "Your email address was already verified. Thank you!",
        True,
    ),
    "INVALID_VERIFICATION_LINK": (
        "Invalid link",
        "The verification link is invalid or has expired.",
        False,
    ),
    "VERIFICATION_NOT_FOUND": (
        "Link not found",
        "This verification link is invalid or has already been used.",
        False,
    ),
    "VERIFICATION_EXPIRED": (
        "Link expired",
        "This verification link has expired. Please contact your administrator.",
        False,
    ),
}
VERIFICATION_ERROR_PAGE = (
    "Error",
    "A technical error occurred. Please try again later.",
    False,
)


async def _read_json(request: Request) -> Any:
    """Parse the body as JSON; an empty or unparseable body counts as {}."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        return {}


@router.post("", responses=ERROR_RESPONSES)
async def auth_action(
    request: Request,
    dispatcher: RequestRouter = Depends(get_request_router),
) -> JSONResponse:
    """
    Run one auth action.

    Password hashing and database calls block, so the dispatcher runs in
    the threadpool rather than on the event loop.
    """
    body = await _read_json(request)
    status_code, payload = await run_in_threadpool(dispatcher.handle, body, request.headers)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


@router.options("")
async def auth_preflight() -> Response:
    """Plain OPTIONS requests; CORS preflights are answered by the middleware."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/verify-email", response_class=HTMLResponse)
async def verify_email(
    token: Optional[str] = Query(None),
    dispatcher: RequestRouter = Depends(get_request_router),
) -> HTMLResponse:
    """Public landing page for the link sent in password emails."""
    status_code, outcome = await run_in_threadpool(dispatcher.confirm_email, token)
    title, message, success = VERIFICATION_PAGES.get(outcome, VERIFICATION_ERROR_PAGE)
    return HTMLResponse(verification_page(title, message, success), status_code=status_code)
