"""Authentication boundary: bearer credential to user ID"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.api.errors import http_error
from app.deps.common import get_db_session, get_trace_id
from core.models import User

logger = logging.getLogger(__name__)


class CredentialResolver(ABC):
    """Resolves an opaque bearer credential to a user ID"""

    @abstractmethod
    def resolve(self, credential: str, session: Session) -> Optional[str]:
        """Return the user ID bound to the credential, or None if invalid"""
        pass


class StubCredentialResolver(CredentialResolver):
    """
    Treats the credential as a user ID and accepts it if the user exists.

    Stands in for the auth service, which issues and validates real tokens.
    """

    def resolve(self, credential: str, session: Session) -> Optional[str]:
        user = session.get(User, credential)
        return user.id if user is not None else None


def get_credential_resolver() -> CredentialResolver:
    return StubCredentialResolver()


def _auth_error(status_code: int, code: str, message: str, trace_id: str) -> HTTPException:
    error = http_error(status_code, code, message, trace_id)
    if status_code == 401:
        error.headers = {"WWW-Authenticate": "Bearer"}
    return error


def get_current_user_id(
    request: Request,
    session: Session = Depends(get_db_session),
    resolver: CredentialResolver = Depends(get_credential_resolver),
    trace_id: str = Depends(get_trace_id)
) -> str:
    """401 without a bearer credential, 403 when it does not resolve"""
    auth_header = request.headers.get("authorization", "")
    scheme, _, credential = auth_header.partition(" ")
    credential = credential.strip()

    if scheme.lower() != "bearer" or not credential:
        raise _auth_error(401, "AUTH_REQUIRED", "Access token required", trace_id)

    user_id = resolver.resolve(credential, session)
    if user_id is None:
        logger.warning("Rejected bearer credential", extra={"trace_id": trace_id})
        raise _auth_error(403, "INVALID_TOKEN", "Invalid token", trace_id)

    return user_id
