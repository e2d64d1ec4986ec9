"""
RedSocial Backend — Comment Schemas
=====================================
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    text: str = Field(min_length=1, description="Body of the comment")


class CommentResponse(BaseModel):
    id: int
    user_id: int = Field(description="Author of the comment")
    publication_id: int
    text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
