"""
Credit Transaction database model.

Immutable ledger of every credit movement.
"""

import uuid

from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Uuid
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.credit_enums import TransactionType


class CreditTransaction(Base):
    """
    Credit Transaction model.

    Append-only audit trail of credit movements. System-originated credits
    (signup bonus, admin adjustment) have no sender.
    NO updates or deletions allowed.
    """
    __tablename__ = "transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Parties
    from_user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=True, index=True)
    to_user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    # Linkage
    swap_id = Column(Uuid, ForeignKey("swaps.id", ondelete="CASCADE"), nullable=True, index=True)

    # Financials
    amount = Column(Integer, nullable=False)
    transaction_type = Column(Enum(TransactionType), nullable=False, index=True)
    description = Column(String(255), nullable=True)

    # Timestamps (Immutable - no updated_at)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<CreditTransaction(id={self.id}, type='{self.transaction_type.value}', amount={self.amount})>"
