"""
Almacenamiento local durable clave → string (a la manera de `localStorage`).

Todo el mapa vive en un archivo JSON y se reemplaza completo en cada escritura
(archivo temporal + `os.replace`). Sin coordinación entre procesos: gana la última escritura.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from voicenotes.core.errors import StorageQuotaError

_log = logging.getLogger("voicenotes.client.storage")


class LocalStorage:
    def __init__(self, path: str | os.PathLike, quota_bytes: Optional[int] = None) -> None:
        self.path = Path(path)
        self.quota_bytes = quota_bytes

    def _read_all(self) -> Dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Formato inválido en {self.path}")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        encoded = json.dumps(data, ensure_ascii=False)
        if self.quota_bytes is not None and len(encoded.encode("utf-8")) > self.quota_bytes:
            raise StorageQuotaError(f"Cuota excedida ({self.quota_bytes} bytes)")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=".storage-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(encoded)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get_item(self, key: str) -> Optional[str]:
        """Valor de `key` o None. Propaga ValueError/OSError si el archivo está dañado."""
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Reemplaza el valor de `key`. Lanza OSError (incl. StorageQuotaError)."""
        try:
            data = self._read_all()
        except ValueError:
            _log.warning("Almacenamiento local dañado en %s; se reescribe", self.path)
            data = {}
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        try:
            data = self._read_all()
        except ValueError:
            data = {}
        if data.pop(key, None) is not None:
            self._write_all(data)
