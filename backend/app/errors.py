from __future__ import annotations
"""Typed workflow errors.

All of them are werkzeug HTTPExceptions so the unified handler in create_app renders
them with the standard {"error": {status, title, detail}} shape. Extra context
(required_role, field_errors, ...) is merged into that payload.
"""
from typing import Any, Dict, List, Optional, Union
from werkzeug.exceptions import HTTPException


class WorkflowError(HTTPException):
    code = 400
    description = 'Workflow error'

    def __init__(self, description: Optional[str] = None, **extra: Any):
        super().__init__(description=description)
        self.extra: Dict[str, Any] = extra


class NotFoundError(WorkflowError):
    code = 404
    description = 'Record not found'


class ForbiddenError(WorkflowError):
    code = 403
    description = 'Not permitted'

    def __init__(self, description: Optional[str] = None, required_role: Union[str, List[str], None] = None,
                 actor_role: Optional[str] = None):
        if description is None and required_role:
            if isinstance(required_role, str):
                description = f"This step requires role '{required_role}' (current role: {actor_role})"
            else:
                roles = ', '.join(f"'{r}'" for r in required_role)
                description = f"This step requires one of roles {roles} (current role: {actor_role})"
        super().__init__(description, required_role=required_role)
        self.required_role = required_role
        self.actor_role = actor_role


class InvalidStateError(WorkflowError):
    code = 400
    description = 'Request is not awaiting approval'


class NotActionableError(InvalidStateError):
    """Status is past the approver chain (approved, paid out or rejected)."""


class NoNextStateError(InvalidStateError):
    description = 'No next status for the current status'


class ConcurrentModificationError(WorkflowError):
    code = 409
    description = 'Request was changed by someone else; reload and try again'


class PersistenceError(WorkflowError):
    code = 503
    description = 'Could not save changes; please retry'


class ValidationError(WorkflowError):
    code = 400
    description = 'Invalid input'

    def __init__(self, field_errors: Dict[str, str], description: Optional[str] = None):
        super().__init__(description or 'Invalid input', field_errors=field_errors)
        self.field_errors = field_errors


class AuditWriteWarning(UserWarning):
    """Status change committed but its approval record could not be written.

    Returned inside a successful result, never raised.
    """

    def __init__(self, message: str = 'Status updated, but the approval history could not be saved', cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


__all__ = [
    'WorkflowError', 'NotFoundError', 'ForbiddenError', 'InvalidStateError', 'NotActionableError',
    'NoNextStateError', 'ConcurrentModificationError', 'PersistenceError', 'ValidationError',
    'AuditWriteWarning',
]
