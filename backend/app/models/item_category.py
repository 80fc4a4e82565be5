from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import BigInteger, Integer, String, DateTime, UniqueConstraint, func

from .authz import Base


class BudgetItemCategory(Base):
    """Item names seen in submitted requests, per department and year (form suggestions)."""
    __tablename__ = 'budget_item_categories'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    unit_price: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    use_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint('name', 'department', 'year', name='uq_item_category'),)
