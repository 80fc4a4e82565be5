from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
from flask import abort
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity

from app.constants.roles import ROLE_STUDENT


@dataclass(frozen=True)
class Actor:
    """Who is acting. Passed explicitly into authorization and lifecycle calls."""
    id: int
    role: str
    department: Optional[str] = None


def actor_from_claims(identity, claims: dict) -> Actor:
    return Actor(
        id=int(identity),
        role=claims.get('role') or ROLE_STUDENT,
        department=claims.get('department'),
    )


def get_current_actor() -> Optional[Actor]:
    """Actor for the current request's access token, or None when unauthenticated."""
    verify_jwt_in_request(optional=True)
    ident = get_jwt_identity()
    if ident is None:
        return None
    return actor_from_claims(ident, get_jwt())


def require_actor() -> Actor:
    actor = get_current_actor()
    if actor is None:
        abort(401, description='Login required')
    return actor


__all__ = ['Actor', 'actor_from_claims', 'get_current_actor', 'require_actor']
