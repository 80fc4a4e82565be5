from __future__ import annotations
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import BigInteger, Integer, String, Text, JSON, ForeignKey, DateTime, func

from .authz import Base
from app.constants import workflow


class BudgetRequest(Base):
    __tablename__ = 'budget_requests'
    ALL_STATUSES = workflow.ALL_STATUSES
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    fund_id: Mapped[int] = mapped_column(ForeignKey('budget_funds.id'), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    # Yen, always the recomputed sum of line_items[*].amount
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    organization: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    payee: Mapped[str] = mapped_column(String(200), nullable=False)
    line_items: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)
    attachment_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=workflow.INITIAL_STATUS, index=True)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship('User')
    fund = relationship('BudgetFund')

# Status flow: see app.constants.workflow (approver chain, then office disbursement).
# Rows are never deleted; completed and rejected are final.
