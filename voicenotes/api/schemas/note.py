"""
Esquemas Pydantic para `note` (singular), alineados a convención en inglés.
"""
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator


class NoteCreate(BaseModel):
    title: str = Field(..., max_length=500)
    content: str = ""
    is_pinned: bool = False
    is_favorited: bool = False


class NoteUpdate(BaseModel):
    """Actualización parcial; al menos un campo."""
    title: Optional[str] = Field(default=None, max_length=500)
    content: Optional[str] = None
    is_pinned: Optional[bool] = None
    is_favorited: Optional[bool] = None

    @model_validator(mode="after")
    def _not_empty(self):
        if not self.model_dump(exclude_none=True):
            raise ValueError("Sin campos para actualizar")
        return self


class NoteOut(BaseModel):
    id: str
    user_id: str
    title: str
    content: str
    is_pinned: bool
    is_favorited: bool
    created_at: str
    updated_at: str


class NoteListOut(BaseModel):
    note: List[NoteOut]
