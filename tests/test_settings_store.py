import json
import threading

from screen_guardian.settings_store import SettingsStore


def test_write_through_survives_reload(tmp_path):
    path = str(tmp_path / "settings.json")
    store = SettingsStore(path)
    store.load()
    assert store.set("limit_monday", "90")

    again = SettingsStore(path)
    again.load()
    assert again.get("limit_monday") == "90"


def test_creates_missing_directory(tmp_path):
    store = SettingsStore(str(tmp_path / "nested" / "dir" / "settings.json"))
    store.load()
    assert store.set("a", "1")
    assert (tmp_path / "nested" / "dir" / "settings.json").exists()


def test_corrupt_file_starts_empty(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    store = SettingsStore(str(path))
    store.load()
    assert store.snapshot() == {}


def test_non_object_file_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(["a", "b"]), encoding="utf-8")
    store = SettingsStore(str(path))
    store.load()
    assert store.snapshot() == {}


def test_values_are_strings(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"limit_monday": 90, "gone": None}), encoding="utf-8")
    store = SettingsStore(str(path))
    store.load()
    assert store.snapshot() == {"limit_monday": "90"}


def test_failed_save_keeps_memory_value(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = SettingsStore(str(blocker / "settings.json"))
    assert not store.set("limit_monday", "90")
    assert store.get("limit_monday") == "90"


def test_set_many_is_one_write(tmp_path):
    path = tmp_path / "settings.json"
    store = SettingsStore(str(path))
    store.load()
    store.set_many({"a": "1", "b": "2"})
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1", "b": "2"}
    assert store.contains("a")
    assert not store.contains("c")


def test_concurrent_writers_leave_complete_file(tmp_path):
    path = tmp_path / "settings.json"
    store = SettingsStore(str(path))
    store.load()

    def writer(prefix):
        for i in range(50):
            store.set(f"{prefix}{i}", str(i))

    threads = [threading.Thread(target=writer, args=(p,)) for p in ("a", "b", "c")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk == store.snapshot()
    assert len(on_disk) == 150
    assert not (tmp_path / "settings.json.tmp").exists()
