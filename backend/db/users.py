from fastapi_users.db import SQLAlchemyBaseUserTableUUID
from .database import Base


class User(SQLAlchemyBaseUserTableUUID, Base):
    """Dashboard administrator. Branch employees authenticate with access codes instead."""
    __tablename__ = "users"
