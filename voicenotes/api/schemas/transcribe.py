"""Schemas de la función transcribe-and-format."""
from typing import Optional
from pydantic import BaseModel


class TranscribeIn(BaseModel):
    audio: Optional[str] = None  # base64


class NotePayloadOut(BaseModel):
    title: str
    content: str


class FunctionErrorOut(BaseModel):
    error: str
    details: Optional[str] = None
