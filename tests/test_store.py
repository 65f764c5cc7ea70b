import json
import os
from pathlib import Path

from hub.categories import CategoryManager
from hub.links import LinkManager
from hub.models import DEFAULT_CATEGORY_ID, DEFAULT_FILTER_KEYWORD, DEFAULT_SITE_TITLE
from hub.store import DATA_DIR, DocumentStore

ROOT = Path(__file__).resolve().parents[1]


def write_doc(path, doc):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(doc), encoding="utf-8")


def test_fresh_store_has_only_default_category(store, data_file):
    assert [c.id for c in store.categories] == [DEFAULT_CATEGORY_ID]
    assert store.categories[0].is_default
    assert store.categories[0].order == -1
    assert store.links == []
    assert store.next_id == 1
    assert store.next_category_id == 1
    assert store.site_title == DEFAULT_SITE_TITLE
    # Loading alone never writes the file
    assert not data_file.exists()


def test_save_creates_directory_and_round_trips(store, data_file):
    store.site_title = "Lab"
    assert store.save() is True
    saved = json.loads(data_file.read_text())
    assert saved["siteTitle"] == "Lab"
    assert saved["categories"][0]["isDefault"] is True
    assert saved["filterConfig"] == {"enabled": False, "keyword": DEFAULT_FILTER_KEYWORD}

    reloaded = DocumentStore(data_file)
    reloaded.load()
    assert reloaded.to_dict() == store.to_dict()


def test_filter_config_missing_keyword_keeps_other_keys(data_file):
    write_doc(data_file, {"filterConfig": {"enabled": True}})
    s = DocumentStore(data_file)
    s.load()
    assert s.filter_config.enabled is True
    assert s.filter_config.keyword == DEFAULT_FILTER_KEYWORD


def test_config_reconciled_per_key(data_file):
    write_doc(data_file, {
        "chatConfig": {"provider": "ollama", "ollamaModel": "llama3", "bogus": 1},
        "colorConfig": {"primaryColor": "not-a-color"},
        "siteTitle": "   ",
        "somethingUnknown": True,
    })
    s = DocumentStore(data_file)
    s.load()
    assert s.chat_config.provider == "ollama"
    assert s.chat_config.ollama_model == "llama3"
    assert s.chat_config.api_url == ""
    assert s.color_config.primary_color == "#330099"
    assert s.site_title == DEFAULT_SITE_TITLE
    assert "somethingUnknown" not in s.to_dict()


def test_counters_raised_above_ids_in_use(data_file):
    write_doc(data_file, {
        "links": [{"id": 7, "name": "a", "url": "http://a", "categoryId": None, "createdAt": "x"}],
        "categories": [{"id": 4, "name": "c", "order": 0, "createdAt": "x"}],
        "nextId": 2,
        "nextCategoryId": 9,
    })
    s = DocumentStore(data_file)
    s.load()
    assert s.next_id == 8
    assert s.next_category_id == 9


def test_malformed_and_duplicate_entries_skipped(data_file):
    write_doc(data_file, {
        "links": [
            {"id": 1, "name": "a", "url": "http://a"},
            {"id": 1, "name": "dup", "url": "http://dup"},
            {"name": "no id"},
            "junk",
        ],
    })
    s = DocumentStore(data_file)
    s.load()
    assert [(l.id, l.name) for l in s.links] == [(1, "a")]


def test_persisted_default_category_is_kept_and_pinned_first(data_file):
    write_doc(data_file, {
        "categories": [
            {"id": 2, "name": "Media", "order": 0, "createdAt": "x"},
            {"id": -1, "name": "NAVIGATION", "order": 5, "isDefault": True, "createdAt": "x"},
        ],
    })
    s = DocumentStore(data_file)
    s.load()
    defaults = [c for c in s.categories if c.is_default]
    assert len(defaults) == 1
    assert defaults[0].order == -1
    assert len(s.categories) == 2


def test_corrupt_file_falls_back_to_defaults(data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("{not json")
    s = DocumentStore(data_file)
    s.load()
    assert [c.id for c in s.categories] == [DEFAULT_CATEGORY_ID]
    assert s.links == []


def test_non_object_document_falls_back_to_defaults(data_file):
    write_doc(data_file, [1, 2, 3])
    s = DocumentStore(data_file)
    s.load()
    assert s.next_id == 1
    assert len(s.categories) == 1


def test_save_failure_is_swallowed(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    s = DocumentStore(blocker / "data.json")
    s.load()
    assert s.save() is False


def test_mutate_skips_save_when_block_raises(store, data_file):
    try:
        with store.mutate():
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert not data_file.exists()

    with store.mutate() as s:
        s.homepage_message = "hi"
    assert json.loads(data_file.read_text())["homepageMessage"] == "hi"


def test_links_to_missing_categories_are_unassigned(data_file):
    write_doc(data_file, {
        "links": [
            {"id": 1, "name": "Router", "url": "http://192.168.1.1", "categoryId": 99},
            {"id": 2, "name": "NAS", "url": "http://nas", "categoryId": 3},
            {"id": 3, "name": "Home", "url": "http://home", "categoryId": DEFAULT_CATEGORY_ID},
        ],
        "categories": [{"id": 3, "name": "Storage", "private": False, "order": 0}],
    })
    s = DocumentStore(data_file)
    s.load()
    assert [link.category_id for link in s.links] == [None, 3, DEFAULT_CATEGORY_ID]

    # The unassigned link can be saved again without tripping the category check
    updated = LinkManager(s).update(1, "Router", "http://192.168.1.1", None)
    assert updated.category_id is None


def test_mutations_succeed_when_file_is_unwritable(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    s = DocumentStore(blocker / "data.json")
    s.load()

    cat = CategoryManager(s).create("Tools")
    link = LinkManager(s).create("Router", "http://192.168.1.1", cat.id)

    assert cat.id == 1
    assert link.category_id == 1
    assert [c.name for c in s.categories] == ["NAVIGATION", "Tools"]
    assert [l.name for l in s.links] == ["Router"]
    assert not (blocker / "data.json").exists()


def test_default_data_dir_sits_beside_package():
    expected = Path(os.environ["HUB_DATA_DIR"]) if os.getenv("HUB_DATA_DIR") else ROOT / "data"
    assert DATA_DIR == expected
    assert DocumentStore().path == DATA_DIR / "data.json"
