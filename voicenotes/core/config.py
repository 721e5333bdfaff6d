"""Configuración central de la aplicación (Pydantic Settings).

- Carga variables desde .env en la raíz del repositorio.
- `Settings`: servidor (CORS, Mongo, Auth/JWT, OpenAI, función de transcripción).
- `ClientSettings`: cliente de notas (URL del backend, llave pública, almacenamiento local).
"""
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resuelve el .env ubicado en la raíz del repo (independiente del CWD)
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    """Variables del servidor con valores por defecto razonables.

    Nota: los valores pueden sobreescribirse vía variables de entorno (.env).
    """
    # App
    app_name: str = "Voice Notes API"
    api_prefix: str = "/api"
    functions_prefix: str = "/functions/v1"

    # CORS (API de notas; la función de transcripción tiene su propio CORS)
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    cors_allow_any: bool = False

    # Mongo
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "voicenotes"
    mongo_tls: bool = False
    mongo_tls_insecure: bool = False  # allows invalid certs (dev only)

    # Auth / JWT
    jwt_secret: str = "change-me-in-production-32-bytes-min"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # Llave pública del cliente (header `apikey`); si es None no se exige
    client_key: str | None = None

    # OpenAI (secreto del servidor, nunca se expone al cliente)
    openai_api_key: str | None = None
    openai_transcription_model: str = "whisper-1"
    openai_format_model: str = Field(
        "gpt-4.1-nano",
        validation_alias=AliasChoices("VOICENOTES_FORMAT_MODEL", "OPENAI_FORMAT_MODEL"),
    )
    openai_format_temperature: float = 0.3
    openai_timeout_seconds: float = 60.0

    # Límite del audio recibido (base64 decodificado)
    max_audio_bytes: int = 25 * 1024 * 1024

    log_level: str = "INFO"

    @property
    def api_prefix_normalized(self) -> str:
        """Devuelve `api_prefix` con formato consistente.

        - Siempre inicia con '/'
        - Sin '/' final (excepto cuando es solo '/')
        - Si está vacío, devuelve ""
        """
        pref = (self.api_prefix or "").strip()
        if not pref:
            return ""
        if not pref.startswith('/'):
            pref = '/' + pref
        if len(pref) > 1 and pref.endswith('/'):
            pref = pref[:-1]
        return pref

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_api_key)

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # no fallar si hay variables no usadas
    )


class ClientSettings(BaseSettings):
    """Ajustes del cliente (prefijo `VOICENOTES_`)."""
    backend_url: str = "http://localhost:8000"
    api_prefix: str = "/api"
    transcribe_path: str = "/functions/v1/transcribe-and-format"
    # Llave pública (equivalente a la anon key); solo da forma a las peticiones
    client_key: str | None = None
    storage_path: Path = Path.home() / ".voicenotes" / "storage.json"
    storage_quota_bytes: int | None = 5 * 1024 * 1024
    request_timeout: float = 60.0
    sample_rate: int = 16000

    @property
    def api_base_url(self) -> str:
        return self.backend_url.rstrip("/") + "/" + self.api_prefix.strip("/")

    @property
    def transcribe_url(self) -> str:
        return self.backend_url.rstrip("/") + "/" + self.transcribe_path.lstrip("/")

    model_config = SettingsConfigDict(
        env_prefix="VOICENOTES_",
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
