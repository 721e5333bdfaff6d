"""
Función `transcribe-and-format`: audio base64 → `{title, content}`.
Errores con forma `{error, details?}` (no pasa por los handlers globales de la API).
"""
import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, PlainTextResponse

from voicenotes.api.schemas.transcribe import FunctionErrorOut, NotePayloadOut, TranscribeIn
from voicenotes.core.config import settings
from voicenotes.services import transcribe_service as service

_log = logging.getLogger("voicenotes.function")

router = APIRouter(tags=["Functions"])


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = FunctionErrorOut(error=error, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


@router.options("/transcribe-and-format", include_in_schema=False)
def transcribe_options() -> PlainTextResponse:
    return PlainTextResponse("ok")


@router.post(
    "/transcribe-and-format",
    response_model=NotePayloadOut,
    responses={400: {"model": FunctionErrorOut}, 500: {"model": FunctionErrorOut}},
    summary="Transcribir y formatear nota de voz",
)
def transcribe_and_format(payload: TranscribeIn):
    if not payload.audio:
        return _error(status.HTTP_400_BAD_REQUEST, "No audio data provided")
    _log.info("Audio base64 recibido, longitud=%s", len(payload.audio))

    try:
        audio = service.decode_audio(payload.audio)
    except ValueError as e:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid audio data", str(e))
    if len(audio) > settings.max_audio_bytes:
        return _error(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "Audio too large")

    try:
        note = service.transcribe_and_format(audio)
    except service.TranscriptionFailed as e:
        _log.error("Error en transcribe-and-format: %s", e)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to process audio", str(e))
    return NotePayloadOut(**note)
