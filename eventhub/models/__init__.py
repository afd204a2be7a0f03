# Import models so that they register with Base.metadata
from eventhub.models.comments import Comment
from eventhub.models.events import Event
from eventhub.models.favorites import Favorite
from eventhub.models.registrations import Registration
from eventhub.models.users import User

__all__ = ["Comment", "Event", "Favorite", "Registration", "User"]
