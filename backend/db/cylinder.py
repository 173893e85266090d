from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from .database import Base


class CylinderGroup(Base):
    __tablename__ = "cylinder_groups"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True, index=True)

    types = relationship("CylinderType", back_populates="group")


class CylinderType(Base):
    __tablename__ = "cylinder_types"

    id = Column(Integer, primary_key=True)
    label = Column(String, nullable=False)
    group_id = Column(Integer, ForeignKey("cylinder_groups.id", ondelete="RESTRICT"), nullable=False, index=True)

    group = relationship("CylinderGroup", back_populates="types")
    branches = relationship("Branch", secondary="branch_cylinder_types", back_populates="cylinder_types")
