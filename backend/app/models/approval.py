from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, ForeignKey, DateTime

from .authz import Base


def _utcnow() -> datetime:
    # Python-side default keeps sub-second ordering on SQLite
    return datetime.now(timezone.utc)


class BudgetApproval(Base):
    """Append-only record of one approve/reject decision."""
    __tablename__ = 'budget_approvals'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    request_id: Mapped[int] = mapped_column(ForeignKey('budget_requests.id'), nullable=False, index=True)
    approver_id: Mapped[int] = mapped_column(Integer, nullable=False)
    approver_role: Mapped[str] = mapped_column(String(32), nullable=False)
    decision: Mapped[str] = mapped_column(String(16), nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default='')
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

__all__ = ['BudgetApproval']
