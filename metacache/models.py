from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class NewFile(BaseModel):
    """Metadata of a file that has already been placed in storage and should be registered"""

    original_name: str
    filename: str  # name of the file in storage
    mime_type: str | None = None
    size: Annotated[int, Field(ge=0)] = 0
    path: str  # canonical cache key, e.g. uploads/docs/1700000000000-42.pdf
    owner_id: str | None = None
    url: str | None = None
    checksum: str | None = None
    metadata: dict[str, Any] | None = None


class FileMetadata(BaseModel):
    """
    Cached projection of a stored file record. This is never the source of truth,
    it is rebuilt from the record store whenever needed.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    owner_id: str | None = None
    original_name: str
    filename: str
    mime_type: str | None = None
    size: int
    path: str
    url: str | None = None
    checksum: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime


class TreeNode(BaseModel):
    name: str
    type: Literal["file", "folder"]
    path: str
    children: list["TreeNode"] | None = None
