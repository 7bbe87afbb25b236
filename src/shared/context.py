"""
Request Context
===============

Context variables shared between middleware, logging and the core.
"""

from contextvars import ContextVar, Token

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_current_owner: ContextVar[str | None] = ContextVar("current_owner", default=None)


def get_request_id() -> str | None:
    return _request_id.get()


def set_request_id(request_id: str | None) -> Token:
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _request_id.reset(token)


def get_current_owner() -> str | None:
    return _current_owner.get()


def set_current_owner(owner_id: str | None) -> Token:
    return _current_owner.set(owner_id)
