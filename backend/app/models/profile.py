"""
Profile database model.

One profile per authenticated identity; holds the credit balance.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, Numeric, Uuid, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import ProfileRole


class Profile(Base):
    """
    Profile model.

    The primary key is the identity provider's user id, so first-login
    provisioning is an upsert by id. The credit balance and the
    taught/learned counters are written only by the settlement engine.
    """
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    username = Column(String(100), unique=True, nullable=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String(500), nullable=True)

    role = Column(Enum(ProfileRole), default=ProfileRole.USER, nullable=False)

    # Credits
    credits = Column(Integer, default=0, nullable=False)

    # Aggregate statistics
    skills_taught = Column(Integer, default=0, nullable=False)
    skills_learned = Column(Integer, default=0, nullable=False)
    average_rating = Column(Numeric(3, 2, asdecimal=False), default=0.0, nullable=False)
    total_reviews = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_profiles_credits_non_negative"),
    )

    def __repr__(self):
        return f"<Profile(id={self.id}, email='{self.email}', credits={self.credits})>"
