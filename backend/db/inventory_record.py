from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


class InventoryRecord(Base):
    """Full/empty count of one cylinder type at one branch for one week.

    Rows are append-only: written by a submission, removed only by the admin
    bulk delete. ``submitted_by_code`` is a soft reference to
    ``access_codes.code`` (no FK) so deleting or renaming a code never touches
    history.
    """
    __tablename__ = "inventory_records"
    __table_args__ = (
        UniqueConstraint("branch_id", "type_id", "week_ending", name="ux_inventory_records_branch_type_week"),
        CheckConstraint("full_count >= 0 AND empty_count >= 0", name="ck_inventory_records_counts_non_negative"),
    )
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="RESTRICT"), nullable=False, index=True)
    type_id = Column(Integer, ForeignKey("cylinder_types.id", ondelete="RESTRICT"), nullable=False, index=True)
    week_ending = Column(Date, nullable=False, index=True)
    full_count = Column(Integer, nullable=False)
    empty_count = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    submitted_by_code = Column(String, nullable=True, index=True)

    branch = relationship("Branch")
    cylinder_type = relationship("CylinderType")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "branchId": self.branch_id,
            "typeId": self.type_id,
            "weekEnding": self.week_ending,
            "fullCount": self.full_count,
            "emptyCount": self.empty_count,
            "createdAt": self.created_at,
        }
