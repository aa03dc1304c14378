"""Route modules for the DevTerminal API."""
from . import auth, health, posts, users

__all__ = ["auth", "health", "posts", "users"]
