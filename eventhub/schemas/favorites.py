from pydantic import BaseModel


class FavoriteToggleOut(BaseModel):
    event_id: int
    is_favorite: bool
