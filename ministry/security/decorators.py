from __future__ import annotations

from collections.abc import Callable


def require_scopes(scopes: list[str]) -> Callable:
    """
    Restrict an endpoint to callers whose active scope is one of `scopes`.

    The decorator does NOT perform auth itself; it attaches metadata that the
    global security dependency reads after routing.
    """

    def decorator(fn: Callable) -> Callable:
        existing = set(getattr(fn, "__security_required_scopes__", set()))
        setattr(fn, "__security_required_scopes__", existing | set(scopes))
        return fn

    return decorator


def scope_filtered() -> Callable:
    """
    Enable scope filtering of listing queries for this endpoint.
    """

    def decorator(fn: Callable) -> Callable:
        setattr(fn, "__security_scope_filter__", True)
        return fn

    return decorator
