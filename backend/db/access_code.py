from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from .database import Base


class AccessCode(Base):
    """Shared-secret code a branch employee types in to submit counts.

    Codes are stored and compared as plain, case-sensitive strings.
    """
    __tablename__ = "access_codes"

    id = Column(Integer, primary_key=True)
    code = Column(String, nullable=False, unique=True, index=True)
    user_name = Column(String, nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="RESTRICT"), nullable=False, index=True)
    active = Column(Boolean, nullable=False, default=True)

    branch = relationship("Branch", back_populates="access_codes")
