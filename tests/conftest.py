import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hub.categories import CategoryManager  # noqa: E402
from hub.config import ConfigRegistry  # noqa: E402
from hub.links import LinkManager  # noqa: E402
from hub.projects import NotesRepository  # noqa: E402
from hub.store import DocumentStore  # noqa: E402


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data" / "data.json"


@pytest.fixture
def store(data_file):
    s = DocumentStore(data_file)
    s.load()
    return s


@pytest.fixture
def categories(store):
    return CategoryManager(store)


@pytest.fixture
def links(store):
    return LinkManager(store, checker=lambda url, timeout: url.startswith("http://up"))


@pytest.fixture
def config(store):
    return ConfigRegistry(store)


@pytest.fixture
def notes(tmp_path):
    return NotesRepository(tmp_path / "data" / "projects")
