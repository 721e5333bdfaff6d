"""Transcripción y formateo de notas de voz (Whisper → chat con JSON mode).

Etapas estrictamente secuenciales:
  1) speech-to-text del audio recibido
  2) reformateo del texto crudo a `{title, content}` en Markdown

Una transcripción vacía devuelve la nota centinela sin llamar al modelo de formato.
Cualquier falla del formateo degrada al texto crudo; solo la falla de la
transcripción es fatal para la invocación.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Dict, Optional

from openai import OpenAI, OpenAIError

from voicenotes.core.config import settings
from voicenotes.infrastructure.ai.openai_client import get_openai

_log = logging.getLogger("voicenotes.transcribe")

EMPTY_NOTE: Dict[str, str] = {
    "title": "Empty Note",
    "content": "No speech detected or empty note",
}
FALLBACK_TITLE_CHARS = 50
AUDIO_FILENAME = "recording.wav"

FORMATTING_PROMPT = """You are an elite intelligence scribe, like one who follows Churchill everywhere and writes his speeches, meeting notes, and essays. Transform this voice note transcription into a beautifully crafted, essay-style note with intelligent organization.

Return a JSON object with exactly this structure:
{
  "title": "A compelling, content-rich title that captures the essence",
  "content": "The formatted content in Markdown"
}

Your mission as an intelligent scribe:

1. **INTELLIGENT HEADERS**: Create section headers that ARE the content, not generic labels
   - Bad: "## Overview", "## Key Points", "## Actions"
   - Good: "## The morning routine that changed everything", "## Why most productivity advice fails us"
   - Headers should be scannable story beats: someone reading just the headers gets the narrative
   - Include specific details, numbers, names, or key insights in headers

2. **ESSAY-STYLE FLOW**: Organize content like a thoughtful essay or journal entry
   - Create natural narrative progression between sections
   - Group related ideas into coherent, digestible paragraphs (2-4 sentences each)
   - Use smooth transitions to connect thoughts
   - Respect the author's original meaning and voice completely

3. **CONTENT-RICH STRUCTURE**:
   - Lead with the most important insight in each section
   - Break long monologues into meaningful chunks based on topic shifts
   - Use **bold** for key concepts, discoveries, and important names/terms
   - Use *italics* for personal reflections, emphasis, and inner thoughts
   - Create bullet points only for actual lists (not to break up paragraphs)

4. **INTELLIGENT REORGANIZATION**:
   - Reorganize for logical flow while preserving ALL original meaning
   - Move scattered related points together into coherent sections
   - Combine fragmented thoughts into complete ideas

5. **POLISHED LANGUAGE**:
   - Remove filler words ("um", "uh", "you know", repetitive phrases)
   - Fix grammatical errors and clarify unclear phrasing
   - Keep the personal, conversational tone intact

6. **TITLE CRAFTSMANSHIP**:
   - Create a title that captures the main insight, story, or discovery
   - Should intrigue and inform (avoid generic titles)

Raw Transcription: "{raw}\""""


class TranscriptionFailed(Exception):
    """Falla de la etapa de speech-to-text (o sin proveedor configurado)."""


def decode_audio(audio_b64: str) -> bytes:
    """Decodifica el audio base64 del payload. Lanza ValueError si es inválido."""
    try:
        data = base64.b64decode(audio_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 audio: {e}")
    if not data:
        raise ValueError("Empty audio")
    return data


def fallback_note(raw: str) -> Dict[str, str]:
    """Nota determinista a partir del texto crudo (primeros 50 caracteres como título)."""
    title = raw[:FALLBACK_TITLE_CHARS] + ("..." if len(raw) > FALLBACK_TITLE_CHARS else "")
    return {"title": title, "content": raw}


def parse_formatted(output: Optional[str]) -> Optional[Dict[str, str]]:
    """Valida la salida JSON del modelo; None si no cumple `{title, content}`."""
    if not output:
        return None
    try:
        data: Any = json.loads(output)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    title, content = data.get("title"), data.get("content")
    if not isinstance(title, str) or not isinstance(content, str):
        return None
    if not title.strip() or not content.strip():
        return None
    return {"title": title, "content": content}


def _client(client: Optional[OpenAI]) -> OpenAI:
    oa = client or get_openai()
    if oa is None:
        raise TranscriptionFailed("OpenAI API key not found")
    return oa


def transcribe(audio: bytes, client: Optional[OpenAI] = None) -> str:
    """Etapa speech-to-text. Lanza TranscriptionFailed ante cualquier error remoto."""
    oa = _client(client)
    try:
        result = oa.audio.transcriptions.create(
            file=(AUDIO_FILENAME, audio, "audio/wav"),
            model=settings.openai_transcription_model,
        )
    except OpenAIError as e:
        raise TranscriptionFailed(str(e)) from e
    return getattr(result, "text", None) or ""


def reformat(raw: str, client: Optional[OpenAI] = None) -> Dict[str, str]:
    """Etapa de formateo; nunca falla: degrada a `fallback_note(raw)`."""
    oa = _client(client)
    try:
        resp = oa.chat.completions.create(
            model=settings.openai_format_model,
            messages=[{"role": "user", "content": FORMATTING_PROMPT.replace("{raw}", raw)}],
            temperature=settings.openai_format_temperature,
            response_format={"type": "json_object"},
        )
        output = resp.choices[0].message.content
    except (OpenAIError, IndexError, AttributeError) as e:
        _log.warning("Formateo falló, se usa texto crudo: %s", e)
        return fallback_note(raw)

    parsed = parse_formatted(output)
    if parsed is None:
        _log.warning("Salida del modelo inválida, se usa texto crudo: %.200r", output)
        return fallback_note(raw)
    return parsed


def transcribe_and_format(audio: bytes, client: Optional[OpenAI] = None) -> Dict[str, str]:
    raw = transcribe(audio, client)
    _log.info("Transcripción recibida chars=%s", len(raw))
    if not raw.strip():
        return dict(EMPTY_NOTE)
    return reformat(raw, client)
