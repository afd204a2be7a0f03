from datetime import datetime

from pydantic import BaseModel, Field

from eventhub.domain.models import RegistrationForm
from eventhub.schemas.events import EventSummary


class RegistrationRequest(BaseModel):
    full_name: str = Field(min_length=2, max_length=200)
    phone_number: str = Field(pattern=r"^\+?[1-9]\d{1,14}$")
    custom_answer: str | None = Field(default=None, max_length=2000)

    def to_form(self) -> RegistrationForm:
        return RegistrationForm(
            full_name=self.full_name.strip(),
            phone_number=self.phone_number,
            custom_answer=self.custom_answer or None,
        )


class RegistrationOut(BaseModel):
    id: int
    event_id: int
    user_id: int
    status: str
    full_name: str
    phone_number: str
    custom_answer: str | None
    created_at: datetime

    class Config:
        from_attributes = True


class UserRegistrationOut(RegistrationOut):
    event: EventSummary | None
