"""
RedSocial Backend — Follow Schemas
====================================
"""

from pydantic import BaseModel


class FollowResponse(BaseModel):
    """Returned by POST /api/user/{followerId}/follow/{followedId}."""
    follower_id: int
    followed_id: int
