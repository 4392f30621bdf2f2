# Importing this package registers every table on Base.metadata
from murmur.models.user import User
from murmur.models.post import Post, MAX_CONTENT_LENGTH
from murmur.models.follow import Follow

__all__ = ["User", "Post", "Follow", "MAX_CONTENT_LENGTH"]
