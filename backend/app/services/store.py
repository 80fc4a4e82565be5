"""Record store used by the lifecycle coordinators.

The coordinators only need four narrow operations; SqlRecordStore implements them on
the app's scoped session. Tests swap in an in-memory store with the same methods.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Callable

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from app.errors import ConcurrentModificationError, PersistenceError
from app.models.approval import BudgetApproval
from app.models.budget_request import BudgetRequest
from app.utils.validation import validate_status

logger = logging.getLogger(__name__)


@dataclass
class ApprovalEntry:
    request_id: int
    approver_id: int
    approver_role: str
    decision: str
    comment: str = ''
    decided_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class RecordStore(Protocol):
    def get_request_by_id(self, request_id: int) -> Optional[BudgetRequest]: ...

    def update_request_status(self, request_id: int, new_status: str, expected_status: Optional[str] = None) -> None: ...

    def insert_approval_record(self, entry: ApprovalEntry) -> BudgetApproval: ...

    def list_approval_records(self, request_id: int) -> List[BudgetApproval]: ...


class SqlRecordStore:
    def __init__(self, session_factory: Optional[Callable] = None):
        if session_factory is None:
            from app import get_db
            session_factory = get_db
        self._session_factory = session_factory

    @property
    def session(self):
        return self._session_factory()

    def get_request_by_id(self, request_id: int) -> Optional[BudgetRequest]:
        return self.session.execute(select(BudgetRequest).where(BudgetRequest.id == request_id)).scalar_one_or_none()

    def update_request_status(self, request_id: int, new_status: str, expected_status: Optional[str] = None) -> None:
        """Write the new status; conditional on expected_status when given.

        Zero matched rows under a condition means another actor moved the request first.
        """
        validate_status(new_status)
        session = self.session
        stmt = update(BudgetRequest).where(BudgetRequest.id == request_id)
        if expected_status is not None:
            stmt = stmt.where(BudgetRequest.status == expected_status)
        stmt = stmt.values(status=new_status, updated_at=datetime.now(timezone.utc)).execution_options(synchronize_session='fetch')
        try:
            result = session.execute(stmt)
            if result.rowcount == 0:
                session.rollback()
                raise ConcurrentModificationError()
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error('status update failed for request %s: %s', request_id, e)
            raise PersistenceError(f'Status update failed: {e.__class__.__name__}; please retry') from e

    def insert_approval_record(self, entry: ApprovalEntry) -> BudgetApproval:
        session = self.session
        record = BudgetApproval(
            request_id=entry.request_id,
            approver_id=entry.approver_id,
            approver_role=entry.approver_role,
            decision=entry.decision,
            comment=entry.comment,
            created_at=entry.decided_at,
        )
        try:
            session.add(record)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(f'Approval record insert failed: {e.__class__.__name__}') from e
        return record

    def list_approval_records(self, request_id: int) -> List[BudgetApproval]:
        q = select(BudgetApproval).where(BudgetApproval.request_id == request_id)
        q = q.order_by(BudgetApproval.created_at.asc(), BudgetApproval.id.asc())
        return list(self.session.execute(q).scalars())


__all__ = ['ApprovalEntry', 'RecordStore', 'SqlRecordStore']
