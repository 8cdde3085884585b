"""
Audit Log Database Model.

Tracks security-critical events and swap lifecycle actions for compliance and dispute handling.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON, Uuid
from sqlalchemy.sql import func
from backend.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model for tracking security events and swap lifecycle actions.

    Events logged:
    - PROFILE_PROVISIONED / TOKEN_REVOKED
    - SWAP_REQUESTED / SWAP_ACCEPTED / SWAP_DECLINED / SWAP_STARTED / SWAP_CANCELLED
    - SWAP_SETTLED / CREDITS_ADJUSTED
    - REVIEW_CREATED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for system actions)
    actor_id = Column(Uuid, index=True, nullable=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # Who was the target of the action (counterparty or adjusted profile)
    target_user_id = Column(Uuid, index=True, nullable=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    # IP address of the request
    ip_address = Column(String(50), nullable=True)

    # Timestamp
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_id}, target={self.target_user_id})>"
