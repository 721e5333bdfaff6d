"""
Taxonomía de errores del cliente de notas.

- Transporte / autorización: fallas del backend remoto (se reportan como notificación genérica).
- Almacenamiento: fallas del almacenamiento local (se registran, nunca llegan a la UI).
- Pipeline: grabación y procesamiento de audio.
"""


class NoteStoreError(Exception):
    """Base de los errores que el repositorio entrega a la UI."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(NoteStoreError):
    """Backend inaccesible, timeout o respuesta no 2xx."""


class AuthorizationError(NoteStoreError):
    """El backend rechazó la operación para la identidad actual."""


class InvalidNoteError(NoteStoreError):
    """Los campos de la nota no pasan la validación del modelo."""


class StorageError(NoteStoreError):
    """Fallo de lectura/escritura del almacenamiento local."""


class StorageQuotaError(OSError):
    """La colección serializada excede la cuota del almacenamiento local."""


class PipelineError(Exception):
    """Fallo fatal de una invocación del pipeline ("processing failed")."""

    def __init__(self, message: str = "processing failed", *, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class PipelineBusyError(PipelineError):
    """Ya hay una invocación en curso; el disparador debe estar deshabilitado."""

    def __init__(self, message: str = "processing already in progress") -> None:
        super().__init__(message)


class RecordingError(Exception):
    """Uso inválido del grabador (p. ej. iniciar dos grabaciones)."""


class AuthError(Exception):
    """Credenciales inválidas o proveedor de identidad inaccesible."""
