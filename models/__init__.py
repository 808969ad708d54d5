"""Persistent models and the DBStorage engine/session wrapper."""
from models.base_model import Base
from models.user import User
from models.video import Video
from models.db_storage import DBStorage

__all__ = ["Base", "User", "Video", "DBStorage"]
