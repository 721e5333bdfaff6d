"""
Rate limit en memoria por (identificador, ruta), con ventana deslizante.

Uso típico:
- Login por IP: allow((ip, "/auth/login"), limit=10, window_seconds=60)

Las llaves sin intentos dentro de la ventana se eliminan para que el
diccionario no crezca con cada IP distinta.
"""
from time import time
from typing import Dict, List, Tuple

BUCKET: Dict[Tuple[str, str], List[float]] = {}


def _evict(now: float, window_seconds: int) -> None:
    stale = [k for k, q in BUCKET.items() if not q or now - q[-1] >= window_seconds]
    for k in stale:
        del BUCKET[k]


def allow(key: Tuple[str, str], limit: int = 5, window_seconds: int = 60) -> bool:
    """Devuelve True si se permite la acción y registra el intento."""
    now = time()
    _evict(now, window_seconds)
    q = [t for t in BUCKET.get(key, []) if now - t < window_seconds]
    if len(q) >= limit:
        BUCKET[key] = q
        return False
    q.append(now)
    BUCKET[key] = q
    return True


def reset() -> None:
    """Limpia el bucket (tests o reinicios)."""
    BUCKET.clear()
