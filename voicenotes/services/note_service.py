"""
Service layer for notes: thin wrappers over repositories, always scoped to the caller.
"""
from typing import Dict, Any, List, Optional

from voicenotes.repositories import note_repo


def create_note(user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    # El dueño sale del token, nunca del payload
    data = {k: v for k, v in data.items() if k != "user_id"}
    return note_repo.insert_note(user_id, data)


def list_notes(user_id: str) -> List[Dict[str, Any]]:
    return note_repo.list_notes(user_id)


def update_note(user_id: str, note_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return note_repo.update_note(user_id, note_id, changes)


def delete_note(user_id: str, note_id: str) -> bool:
    return note_repo.delete_note(user_id, note_id)
