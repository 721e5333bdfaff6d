"""
Endpoints para `note`: CRUD acotado a la identidad del token.
El `user_id` nunca se toma del cliente; notas ajenas responden 404.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response, status

from voicenotes.api.deps import get_current_user, require_client_key
from voicenotes.api.schemas.note import NoteCreate, NoteListOut, NoteOut, NoteUpdate
from voicenotes.services import note_service


router = APIRouter(prefix="/note", tags=["Note"], dependencies=[Depends(require_client_key)])


@router.get(
    "",
    response_model=NoteListOut,
    summary="Listar notas",
    description="Lista las notas del usuario autenticado (created_at desc).",
)
def list_notes(user: Dict[str, Any] = Depends(get_current_user)) -> NoteListOut:
    items = note_service.list_notes(str(user["_id"]))
    return NoteListOut(note=[NoteOut(**i) for i in items])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=NoteOut,
    summary="Crear nota",
    description="Crea una nota; el servidor asigna id, dueño y timestamps.",
)
def create_note(payload: NoteCreate, user: Dict[str, Any] = Depends(get_current_user)) -> NoteOut:
    doc = note_service.create_note(str(user["_id"]), payload.model_dump())
    return NoteOut(**doc)


@router.patch(
    "/{note_id}",
    response_model=NoteOut,
    summary="Actualizar nota",
    description="Actualización parcial (title, content, is_pinned, is_favorited).",
)
def update_note(note_id: str, payload: NoteUpdate, user: Dict[str, Any] = Depends(get_current_user)) -> NoteOut:
    doc = note_service.update_note(str(user["_id"]), note_id, payload.model_dump(exclude_none=True))
    if doc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Nota no encontrada")
    return NoteOut(**doc)


@router.delete(
    "/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Eliminar nota",
)
def delete_note(note_id: str, user: Dict[str, Any] = Depends(get_current_user)) -> Response:
    if not note_service.delete_note(str(user["_id"]), note_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Nota no encontrada")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
