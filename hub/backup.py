"""Backup and restore for hub data.

Creates a ZIP archive containing:
- data.json  (links, categories and settings)
- projects/  (Markdown project files)
"""

import json
import tempfile
import zipfile
from pathlib import Path, PurePosixPath

from hub.errors import ValidationError
from hub.projects import NOTE_EXTENSION, NotesRepository, sanitize_name
from hub.store import DATA_FILE_NAME, DocumentStore


def create_backup(store: DocumentStore, notes: NotesRepository, dest: Path | None = None) -> Path:
    """Create a ZIP backup of the current document and project files.

    Returns the path to the created ZIP file.
    """
    if dest is None:
        tmp = tempfile.NamedTemporaryFile(delete=False, suffix=".zip", prefix="hub-backup-")
        dest = Path(tmp.name)
        tmp.close()

    with zipfile.ZipFile(dest, "w", zipfile.ZIP_DEFLATED, compresslevel=6) as zf:
        # Snapshot of the in-memory document, not the file on disk
        zf.writestr(DATA_FILE_NAME, json.dumps(store.to_dict(), indent=2))

        for name in notes.list():
            zf.write(notes.directory / name, f"projects/{name}")

    return dest


def restore_backup(zip_path: Path, store: DocumentStore, notes: NotesRepository) -> dict:
    """Restore hub data from a ZIP backup.

    Replaces the document and, when the archive holds any, all project
    files. The store is reloaded from the restored file.

    Returns a summary dict with what was restored.
    """
    summary = {"data": False, "projects": 0}

    try:
        zf = zipfile.ZipFile(zip_path, "r")
    except zipfile.BadZipFile as e:
        raise ValidationError(f"Invalid backup file: {e}")

    with zf:
        names = zf.namelist()

        # 1. Document
        if DATA_FILE_NAME in names:
            raw = zf.read(DATA_FILE_NAME)
            try:
                doc = json.loads(raw)
            except ValueError as e:
                raise ValidationError(f"Invalid backup file: {DATA_FILE_NAME} is not JSON ({e})")
            if not isinstance(doc, dict):
                raise ValidationError(f"Invalid backup file: {DATA_FILE_NAME} is not a JSON object")
            with store.lock:
                store.path.parent.mkdir(parents=True, exist_ok=True)
                store.path.write_bytes(raw)
                store.load()
            summary["data"] = True

        # 2. Project files
        project_entries = [n for n in names if n.startswith("projects/") and n.endswith(NOTE_EXTENSION)]
        if project_entries:
            for existing in notes.list():
                notes.delete(existing)
            for entry in project_entries:
                name = sanitize_name(PurePosixPath(entry).name)
                # Raw copy: empty notes are valid in an archive
                (notes.directory / name).write_bytes(zf.read(entry))
                summary["projects"] += 1

    return summary
