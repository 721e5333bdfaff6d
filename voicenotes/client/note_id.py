"""
Identificador de nota como variante etiquetada.

`EphemeralId` vive en el almacenamiento local (prefijo `temp_`);
`PersistentId` fue asignado por el backend. El repositorio enruta por tipo.
"""
from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass
from typing import Union

EPHEMERAL_PREFIX = "temp_"
_ALPHABET = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class EphemeralId:
    key: str

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class PersistentId:
    key: str

    def __str__(self) -> str:
        return self.key


NoteId = Union[EphemeralId, PersistentId]


def parse_note_id(value: str | EphemeralId | PersistentId) -> NoteId:
    if isinstance(value, (EphemeralId, PersistentId)):
        return value
    value = str(value)
    if not value:
        raise ValueError("id de nota vacío")
    if value.startswith(EPHEMERAL_PREFIX):
        return EphemeralId(value)
    return PersistentId(value)


def new_ephemeral_id() -> EphemeralId:
    """`temp_<epoch ms>_<9 caracteres base36>`."""
    suffix = "".join(random.choices(_ALPHABET, k=9))
    return EphemeralId(f"{EPHEMERAL_PREFIX}{int(time.time() * 1000)}_{suffix}")
