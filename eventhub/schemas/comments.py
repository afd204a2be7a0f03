from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)

    @field_validator("content")
    @classmethod
    def strip_content(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Comment can't be empty")
        return value


class CommentOut(BaseModel):
    id: int
    event_id: int
    user_id: int
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
