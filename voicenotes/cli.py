"""CLI del cliente de notas de voz.

Uso típico:
  voicenotes transcribe grabacion.wav
  voicenotes record                # Enter para detener (requiere extra `mic`)
  voicenotes list --search "leche"
  voicenotes pin temp_1712345678901_abc123xyz
  voicenotes login --email ana@notes.dev --password secreto

La sesión y las notas anónimas viven en VOICENOTES_STORAGE_PATH.
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from voicenotes.client.controller import Notification, NotesController, build_controller
from voicenotes.client.models import Note
from voicenotes.client.recorder import SoundDeviceSource
from voicenotes.core.errors import RecordingError
from voicenotes.core.logging import setup_logging


def _print_notes(notes: List[Note]) -> None:
    if not notes:
        print("No notes yet")
        return
    for n in notes:
        flags = ("*" if n.is_pinned else " ") + ("♥" if n.is_favorited else " ")
        print(f"{flags} {n.id}  {n.updated_at:%Y-%m-%d %H:%M}  {n.title}")


def _flush(ctl: NotesController) -> int:
    code = 0
    for msg in ctl.notifications:
        print(f"[{msg.level}] {msg.message}", file=sys.stderr if msg.level == "error" else sys.stdout)
        if msg.level == "error":
            code = 1
    ctl.notifications.clear()
    if ctl.sign_in_prompt is not None:
        print("Nota guardada localmente. Inicia sesión para guardarla de forma permanente.")
    return code


def _record(ctl: NotesController) -> None:
    source = SoundDeviceSource(ctl.pipeline.recorder)
    try:
        source.start()
    except RecordingError as e:
        ctl.notifications.append(Notification("error", str(e)))
        return
    input("Grabando... Enter para detener. ")
    blob = source.stop()
    result = ctl.transcribe_blob(blob)
    if result.ok and result.note is not None:
        print(f"{result.note.title}\n\n{result.note.content}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="voicenotes", description="Notas de voz transcritas y formateadas")
    ap.add_argument("--log-level", default="WARNING")
    sub = ap.add_subparsers(dest="cmd", required=True)

    t = sub.add_parser("transcribe", help="Transcribe un archivo WAV y guarda la nota")
    t.add_argument("path")
    sub.add_parser("record", help="Graba desde el micrófono")

    ls = sub.add_parser("list", help="Lista notas (fijadas primero)")
    ls.add_argument("--search", default="")
    ls.add_argument("--recent", action="store_true", help="Solo las 3 más recientes")

    for name in ("show", "pin", "favorite", "delete"):
        p = sub.add_parser(name)
        p.add_argument("note_id")

    ed = sub.add_parser("edit", help="Edita título/contenido")
    ed.add_argument("note_id")
    ed.add_argument("--title")
    ed.add_argument("--content")

    for name in ("login", "signup"):
        p = sub.add_parser(name)
        p.add_argument("--email", required=True)
        p.add_argument("--password", required=True)
    sub.add_parser("logout")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    ctl = build_controller()
    ctl.start()
    repo = ctl.repository

    if args.cmd == "transcribe":
        result = ctl.transcribe_file(args.path)
        if result.ok and result.note is not None:
            print(f"{result.note.title}\n\n{result.note.content}")
    elif args.cmd == "record":
        _record(ctl)
    elif args.cmd == "list":
        _print_notes(repo.recent() if args.recent else repo.search(args.search))
    elif args.cmd == "show":
        note = repo.get(args.note_id)
        if note is None:
            print("Nota no encontrada", file=sys.stderr)
            return 1
        print(f"{note.title}\n\n{note.content}")
    elif args.cmd == "pin":
        ctl.toggle_pin(args.note_id)
    elif args.cmd == "favorite":
        ctl.toggle_favorite(args.note_id)
    elif args.cmd == "edit":
        fields = {k: v for k, v in (("title", args.title), ("content", args.content)) if v is not None}
        ctl.update_note(args.note_id, **fields)
    elif args.cmd == "delete":
        ctl.delete_note(args.note_id)
    elif args.cmd == "login":
        ctl.sign_in(args.email, args.password)
    elif args.cmd == "signup":
        ctl.sign_up(args.email, args.password)
    elif args.cmd == "logout":
        ctl.sign_out()
    return _flush(ctl)


if __name__ == "__main__":
    raise SystemExit(main())
