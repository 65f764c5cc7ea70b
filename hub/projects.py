"""Markdown project notes stored as individual files."""

import logging
from pathlib import Path, PurePosixPath

from hub.errors import NotFound, ValidationError, require_fields
from hub.store import DATA_DIR

PROJECTS_DIR_NAME = "projects"
PROJECTS_DIR = DATA_DIR / PROJECTS_DIR_NAME
NOTE_EXTENSION = ".md"

logger = logging.getLogger(__name__)


def sanitize_name(name: str) -> str:
    """Reduce name to its last path component so it cannot leave the directory."""
    base = PurePosixPath(str(name).replace("\\", "/")).name
    if base in ("", ".", ".."):
        raise ValidationError(f"Invalid file name: {name!r}")
    return base


class NotesRepository:
    """Each note is an independent file; writes overwrite (last writer wins)."""

    def __init__(self, directory: Path | None = None):
        self.directory = Path(directory) if directory is not None else PROJECTS_DIR

    def _ensure_dir(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def _existing(self, name: str) -> Path:
        path = self.directory / sanitize_name(name)
        if not path.is_file():
            raise NotFound("File not found")
        return path

    def list(self) -> list[str]:
        self._ensure_dir()
        return sorted(f.name for f in self.directory.iterdir() if f.is_file() and f.name.endswith(NOTE_EXTENSION))

    def read(self, name: str) -> str:
        return self._existing(name).read_text(encoding="utf-8")

    def write(self, name: str, content: str) -> str:
        """Create or overwrite a note. Returns the stored file name."""
        require_fields({"name": name, "content": content})
        filename = sanitize_name(name)
        if not filename.endswith(NOTE_EXTENSION):
            filename += NOTE_EXTENSION
        self._ensure_dir()
        (self.directory / filename).write_text(str(content), encoding="utf-8")
        return filename

    def delete(self, name: str) -> None:
        path = self._existing(name)
        path.unlink()
        logger.info("Deleted project file %s", path.name)
