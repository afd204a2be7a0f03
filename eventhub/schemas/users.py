from datetime import datetime

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    full_name: str | None = Field(default=None, max_length=200)
    is_organizer: bool = False


class UserOut(BaseModel):
    id: int
    email: str
    full_name: str | None
    is_organizer: bool
    created_at: datetime

    class Config:
        from_attributes = True
