# export_urls/schemas/users.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from export_urls.db.models import Role


class UserOut(BaseModel):
    id: int
    email: str
    full_name: Optional[str]
    role: Role
    created_at: datetime

    class Config:
        from_attributes = True
