from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from .database import Base


class Branch(Base):
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True, index=True)

    cylinder_types = relationship("CylinderType", secondary="branch_cylinder_types", back_populates="branches")
    access_codes = relationship("AccessCode", back_populates="branch")

    @property
    def to_schema(self):
        return {"id": self.id, "name": self.name}


class BranchCylinderType(Base):
    """Which cylinder types a branch counts on its weekly form."""
    __tablename__ = "branch_cylinder_types"

    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="CASCADE"), primary_key=True)
    type_id = Column(Integer, ForeignKey("cylinder_types.id", ondelete="CASCADE"), primary_key=True)
