"""
Pydantic schemas for folder tree and material requests and responses
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class FolderCreate(BaseModel):
    """Schema for creating a folder"""
    namespace: str = Field(..., pattern="^(quiz|material)$", description="Folder tree the folder belongs to")
    title: str = Field(..., max_length=255, description="Folder title")
    description: Optional[str] = None
    parent_id: Optional[int] = Field(None, description="Parent folder, omit for a root folder")


class FolderUpdate(BaseModel):
    """Schema for renaming a folder"""
    title: str = Field(..., max_length=255)
    description: Optional[str] = None


class FolderResponse(BaseModel):
    """Folder as returned by listings and breadcrumbs"""
    id: int
    namespace: str
    title: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    position: int

    class Config:
        from_attributes = True


class MaterialCreate(BaseModel):
    """Schema for filing a material under a folder"""
    title: str = Field(..., max_length=255)
    file_ref: str = Field(..., max_length=1024, description="Storage reference of the uploaded file")


class MaterialResponse(BaseModel):
    id: int
    folder_id: int
    title: str
    file_ref: str
    position: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
