"""
Request-scoped acting user

The HTTP layer resolves the caller's identity and binds it for the duration
of the request; the plugin info service reads it to stamp release audit
fields. Nothing here makes authorization decisions.

Usage:
    with authenticated_user("jdoe@example.com"):
        service.create_release("netflix.canary", release)
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator, Optional

IdentityResolver = Callable[[], Optional[str]]

_current_user: ContextVar[Optional[str]] = ContextVar("plugininfo_current_user", default=None)


def get_current_user() -> Optional[str]:
    """Return the user bound to the current context, if any."""
    return _current_user.get()


@contextmanager
def authenticated_user(user: Optional[str]) -> Iterator[None]:
    """Bind user as the acting identity within the block."""
    token = _current_user.set(user)
    try:
        yield
    finally:
        _current_user.reset(token)
