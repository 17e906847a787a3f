from .room_hub import room_hub
from .store import session_store

__all__ = ["session_store", "room_hub"]
