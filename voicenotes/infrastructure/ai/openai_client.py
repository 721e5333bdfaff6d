# voicenotes/infrastructure/ai/openai_client.py
from typing import Optional
from openai import OpenAI
from voicenotes.core.config import settings

_client: Optional[OpenAI] = None


def get_openai() -> Optional[OpenAI]:
    """
    Devuelve un cliente de OpenAI si hay API key en settings.
    Mantiene una instancia única en memoria; sin reintentos y con timeout acotado.
    """
    global _client
    if _client is not None:
        return _client

    if not settings.openai_api_key:
        return None

    _client = OpenAI(
        api_key=settings.openai_api_key,
        timeout=settings.openai_timeout_seconds,
        max_retries=0,
    )
    return _client


def reset_openai() -> None:
    """Descarta la instancia en memoria (tests o rotación de key)."""
    global _client
    _client = None
