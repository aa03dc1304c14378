"""SQLAlchemy models exposed for metadata creation and imports."""
from .follow import Follow
from .post import Like, Post
from .user import User

__all__ = ["User", "Post", "Like", "Follow"]
