# Anonymous owner ids for saved recipes, carried in a cookie.
import uuid

from starlette.requests import Request
from starlette.responses import Response

COOKIE = "owner_id"
MAX_AGE = 60 * 60 * 24 * 365 * 2  # two years


def owner_id(request: Request) -> str:
    """Owner id from the cookie, or a freshly minted one."""
    return request.cookies.get(COOKIE) or uuid.uuid4().hex


def remember_owner(request: Request, response: Response, owner: str) -> None:
    if request.cookies.get(COOKIE) != owner:
        response.set_cookie(
            COOKIE, owner, max_age=MAX_AGE, httponly=True, samesite="lax"
        )
