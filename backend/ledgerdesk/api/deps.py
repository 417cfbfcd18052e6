"""Shared API dependencies."""

from fastapi import Depends, Header, Request

from ledgerdesk.core.backend import BackendClient
from ledgerdesk.services.session import ReviewSession, SessionStore


def get_backend(request: Request) -> BackendClient:
    return request.app.state.backend


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_review_session(
    x_review_session: str = Header("default"),
    sessions: SessionStore = Depends(get_sessions),
) -> ReviewSession:
    """The caller's review session, addressed by the X-Review-Session header.

    Raises 404 if the caller has not selected a client yet.
    """
    return sessions.get(x_review_session)


def open_review_session(
    x_review_session: str = Header("default"),
    sessions: SessionStore = Depends(get_sessions),
) -> ReviewSession:
    """Like ``get_review_session`` but starts a session when there is none."""
    return sessions.open(x_review_session)


__all__ = ["get_backend", "get_sessions", "get_review_session", "open_review_session"]
