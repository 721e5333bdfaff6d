"""
Controlador de la app de notas: une pipeline, repositorio y sesión como lo hacía la UI.

Ninguna falla escapa de aquí: todo termina en un `OperationResult` y una notificación.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from voicenotes.client.ephemeral_store import EphemeralNoteStore
from voicenotes.client.http import ApiClient
from voicenotes.client.local_storage import LocalStorage
from voicenotes.client.models import Note, NotePayload
from voicenotes.client.note_id import PersistentId, parse_note_id
from voicenotes.client.persistent_store import PersistentNoteStore
from voicenotes.client.pipeline import TranscriptionPipeline, build_pipeline
from voicenotes.client.repository import NoteRepository, OperationResult, RepositoryMode
from voicenotes.client.session import ApiAuthProvider, SessionGate
from voicenotes.core.config import ClientSettings
from voicenotes.core.errors import AuthError, PipelineError, RecordingError, TransportError

_log = logging.getLogger("voicenotes.client.controller")


@dataclass(frozen=True)
class Notification:
    level: str  # "success" | "error"
    message: str


@dataclass
class NotesController:
    repository: NoteRepository
    pipeline: TranscriptionPipeline
    notifications: List[Notification] = field(default_factory=list)
    sign_in_prompt: Optional[Note] = None

    @property
    def gate(self) -> SessionGate:
        return self.repository.gate

    def _notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level, message))

    def start(self) -> None:
        """Arranque en frío: resuelve la sesión inicial y reporta si falló la carga."""
        self.gate.initialize()
        if not self.repository.load_result.ok:
            self._notify("error", "Failed to load notes")

    # --- grabación ---

    def record(self) -> bool:
        try:
            self.pipeline.start_recording()
        except (PipelineError, RecordingError) as e:
            _log.warning("No se pudo iniciar la grabación: %s", e)
            return False
        return True

    def finish_recording(self) -> OperationResult:
        return self._run(self.pipeline.stop_and_process)

    def transcribe_blob(self, blob: bytes) -> OperationResult:
        return self._run(lambda: self.pipeline.process(blob))

    def transcribe_file(self, path: str) -> OperationResult:
        return self._run(lambda: self.pipeline.process_file(path))

    def _run(self, invoke: Callable[[], NotePayload]) -> OperationResult:
        try:
            payload = invoke()
        except PipelineError as e:
            _log.error("Error procesando audio: %s (%s)", e.message, e.details)
            self._notify("error", "Failed to process audio")
            return OperationResult.failure(TransportError(e.message))
        except OSError as e:
            _log.error("No se pudo leer el audio: %s", e)
            self._notify("error", "Failed to process audio")
            return OperationResult.failure(TransportError(str(e)))
        return self.add_note(payload)

    # --- notas ---

    def add_note(self, payload: NotePayload) -> OperationResult:
        result = self.repository.create(payload.title, payload.content)
        if not result.ok:
            self._notify("error", "Failed to save note")
        elif self.repository.mode is RepositoryMode.ANONYMOUS:
            self.sign_in_prompt = result.note
        else:
            self._notify("success", "Note saved!")
        return result

    def dismiss_sign_in_prompt(self) -> None:
        self.sign_in_prompt = None

    def update_note(self, note_id: str, **fields) -> OperationResult:
        result = self.repository.update(note_id, **fields)
        self._report(result, "Note updated!", "Failed to update note", note_id)
        return result

    def delete_note(self, note_id: str) -> OperationResult:
        result = self.repository.delete(note_id)
        self._report(result, "Note deleted!", "Failed to delete note", note_id)
        return result

    def toggle_pin(self, note_id: str) -> OperationResult:
        result = self.repository.toggle_pin(note_id)
        self._report(result, "Note updated!", "Failed to update note", note_id)
        return result

    def toggle_favorite(self, note_id: str) -> OperationResult:
        result = self.repository.toggle_favorite(note_id)
        self._report(result, "Note updated!", "Failed to update note", note_id)
        return result

    def _report(self, result: OperationResult, ok_msg: str, err_msg: str, note_id: str) -> None:
        # Las notas efímeras se editan en silencio
        if not result.ok:
            self._notify("error", err_msg)
        elif isinstance(parse_note_id(note_id), PersistentId):
            self._notify("success", ok_msg)

    # --- sesión ---

    def sign_in(self, email: str, password: str) -> bool:
        try:
            self.gate.sign_in(email, password)
        except AuthError as e:
            self._notify("error", e.args[0] if e.args else "Sign in failed")
            return False
        if not self.repository.load_result.ok:
            self._notify("error", "Failed to load notes")
        return True

    def sign_up(self, email: str, password: str) -> bool:
        try:
            self.gate.sign_up(email, password)
        except AuthError as e:
            self._notify("error", e.args[0] if e.args else "Sign up failed")
            return False
        self._notify("success", "Account created, you can sign in now")
        return True

    def sign_out(self) -> None:
        self.gate.sign_out()
        self._notify("success", "Signed out successfully")


def build_controller(settings: Optional[ClientSettings] = None, session=None) -> NotesController:
    """Arma el grafo de objetos del cliente a partir de `ClientSettings`."""
    cfg = settings or ClientSettings()
    storage = LocalStorage(cfg.storage_path, quota_bytes=cfg.storage_quota_bytes)
    api = ApiClient(cfg.api_base_url, client_key=cfg.client_key, session=session, timeout=cfg.request_timeout)
    functions = ApiClient(cfg.transcribe_url, client_key=cfg.client_key, session=api.session, timeout=cfg.request_timeout)
    gate = SessionGate(ApiAuthProvider(api, storage))
    repository = NoteRepository(EphemeralNoteStore(storage), PersistentNoteStore(api), gate)
    return NotesController(repository=repository, pipeline=build_pipeline(functions, cfg.sample_rate))

