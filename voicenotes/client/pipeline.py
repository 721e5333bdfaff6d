"""
Pipeline de transcripción del lado cliente: captura → base64 → función remota → `NotePayload`.

Cada invocación es estrictamente secuencial, sin reintentos ni cancelación.
Mientras una invocación está en curso el disparador queda deshabilitado
(`can_record` es False y una nueva invocación lanza `PipelineBusyError`).
"""
from __future__ import annotations

import base64
import logging
from typing import Optional

from voicenotes.client.http import ApiClient
from voicenotes.client.models import NotePayload
from voicenotes.client.recorder import AudioRecorder
from voicenotes.core.errors import NoteStoreError, PipelineBusyError, PipelineError, RecordingError

_log = logging.getLogger("voicenotes.client.pipeline")


def encode_audio(blob: bytes) -> str:
    return base64.b64encode(blob).decode("ascii")


class TranscriptionClient:
    """POST `{audio}` a la función transcribe-and-format y valida `{title, content}`."""

    def __init__(self, api: ApiClient, path: str = "") -> None:
        self.api = api
        self.path = path

    def transcribe(self, audio_b64: str) -> NotePayload:
        try:
            data = self.api.json("POST", self.path, json={"audio": audio_b64})
        except NoteStoreError as e:
            raise PipelineError(details=e.message) from e
        if not isinstance(data, dict):
            raise PipelineError(details="Invalid response from server")
        title, content = data.get("title"), data.get("content")
        if not isinstance(title, str) or not isinstance(content, str) or not title:
            raise PipelineError(details="Invalid response from server")
        return NotePayload(title=title, content=content)


class TranscriptionPipeline:
    def __init__(self, recorder: AudioRecorder, client: TranscriptionClient) -> None:
        self.recorder = recorder
        self.client = client
        self._processing = False

    @property
    def is_recording(self) -> bool:
        return self.recorder.is_recording

    @property
    def is_processing(self) -> bool:
        return self._processing

    @property
    def can_record(self) -> bool:
        return not self._processing

    def start_recording(self) -> None:
        if self._processing:
            raise PipelineBusyError()
        self.recorder.start()

    def stop_and_process(self) -> NotePayload:
        if self._processing:
            raise PipelineBusyError()
        try:
            blob = self.recorder.stop()
        except RecordingError as e:
            raise PipelineError(details=str(e)) from e
        return self.process(blob)

    def process(self, blob: bytes) -> NotePayload:
        """Codifica y envía un blob ya capturado."""
        if self._processing:
            raise PipelineBusyError()
        self._processing = True
        try:
            encoded = encode_audio(blob)
            _log.info("Enviando audio bytes=%s base64=%s", len(blob), len(encoded))
            return self.client.transcribe(encoded)
        finally:
            self._processing = False

    def process_file(self, path: str) -> NotePayload:
        with open(path, "rb") as fh:
            return self.process(fh.read())


def build_pipeline(api: ApiClient, sample_rate: int = 16000, recorder: Optional[AudioRecorder] = None) -> TranscriptionPipeline:
    return TranscriptionPipeline(recorder or AudioRecorder(sample_rate=sample_rate), TranscriptionClient(api))
