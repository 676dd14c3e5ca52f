"""Access to the authenticated principal.

Sign-in happens in front of the application: the identity-aware proxy adds a
header carrying the user's identifier to every request. Google IAP prefixes
the value with the identity source (``accounts.google.com:1234``); only the
part after the last colon is used.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from flask import current_app, flash, redirect, request, url_for

DEFAULT_IDENTITY_HEADER = "X-Goog-Authenticated-User-Id"


def current_user_id() -> Optional[str]:
    header = current_app.config.get("IDENTITY_HEADER", DEFAULT_IDENTITY_HEADER)
    value = request.headers.get(header, "").strip()
    if not value:
        return None
    return value.rsplit(":", 1)[-1] or None


def login_required(message: str) -> Callable:
    """Redirect anonymous visitors to the catalog with ``message`` flashed."""

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapped(*args, **kwargs):
            if current_user_id() is None:
                flash(message, "error")
                return redirect(url_for("index"))
            return view(*args, **kwargs)

        return wrapped

    return decorator


__all__ = ["DEFAULT_IDENTITY_HEADER", "current_user_id", "login_required"]
