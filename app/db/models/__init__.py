from app.db.models.post import ImageSource, Post, PostStatus
from app.db.models.user import User, UserRole

__all__ = ["ImageSource", "Post", "PostStatus", "User", "UserRole"]
