from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, DateTime, String

from models.base import Base, new_id


class User(Base):
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=new_id)
    # Subject id issued by the external identity provider
    external_id = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)


class UserDTO(BaseModel):
    id: str | None = None
    external_id: str | None = None
    name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
