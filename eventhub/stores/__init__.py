from eventhub.stores.interfaces import RegistrationStore
from eventhub.stores.memory_store import InMemoryRegistrationStore
from eventhub.stores.sql_store import SqlRegistrationStore

__all__ = ["InMemoryRegistrationStore", "RegistrationStore", "SqlRegistrationStore"]
