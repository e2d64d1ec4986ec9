"""
RedSocial Backend — Publication Schemas
=========================================
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PublicationCreate(BaseModel):
    """Body of POST /api/user/{id}/publication."""
    text: str = Field(min_length=1, description="Body of the publication")
    image_url: Optional[str] = Field(
        default=None,
        max_length=512,
        description="Optional image reference",
    )


class PublicationUpdate(BaseModel):
    """Body of PUT /api/user/{id}/publication/{publication_id}. Only the text is editable."""
    text: str = Field(min_length=1, description="New body of the publication")


class PublicationResponse(BaseModel):
    id: int
    author_id: int
    text: str
    image_url: Optional[str] = None
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    edited_at: datetime = Field(description="Last edition timestamp (UTC)")

    model_config = ConfigDict(from_attributes=True)
