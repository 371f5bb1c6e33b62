"""Bridge session cookie helpers shared by the bridge and session routers."""

from fastapi import Response

from bridge_config.settings import Settings

SESSION_COOKIE = "bridge_session"
SESSION_COOKIE_PATH = "/api/v1"


def set_session_cookie(
    response: Response,
    token: str,
    settings: Settings,
    max_age_seconds: int,
) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        secure=settings.api_cookie_secure,
        samesite=settings.api_cookie_samesite,
        max_age=max_age_seconds,
        path=SESSION_COOKIE_PATH,
        domain=settings.api_cookie_domain,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE,
        path=SESSION_COOKIE_PATH,
        domain=settings.api_cookie_domain,
    )
