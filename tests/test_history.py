"""Tests for History: role mapping, trimming and JSON persistence."""

import json

from craftbot.domain.models import SYSTEM
from craftbot.history import History


class TestAdd:
    def test_role_mapping(self, tmp_path):
        h = History("andy", storage_dir=str(tmp_path))
        h.add("andy", "on my way")
        h.add(SYSTEM, "You see: oak_log")
        h.add("steve", "come here")
        assert h.turns == [
            {"role": "assistant", "content": "on my way"},
            {"role": "system", "content": "You see: oak_log"},
            {"role": "user", "content": "steve: come here"},
        ]

    def test_trims_oldest(self, tmp_path):
        h = History("andy", storage_dir=str(tmp_path), max_messages=3)
        for i in range(5):
            h.add("steve", f"msg {i}")
        assert [t["content"] for t in h.turns] == ["steve: msg 2", "steve: msg 3", "steve: msg 4"]

    def test_zero_limit_keeps_everything(self, tmp_path):
        h = History("andy", storage_dir=str(tmp_path), max_messages=0)
        for i in range(50):
            h.add("steve", str(i))
        assert len(h.turns) == 50

    def test_get_history_returns_copies(self, tmp_path):
        h = History("andy", storage_dir=str(tmp_path))
        h.add("steve", "hi")
        snapshot = h.get_history()
        snapshot[0]["content"] = "changed"
        snapshot.append({"role": "user", "content": "extra"})
        assert h.turns == [{"role": "user", "content": "steve: hi"}]

    def test_clear(self, tmp_path):
        h = History("andy", storage_dir=str(tmp_path))
        h.add("steve", "hi")
        h.clear()
        assert h.get_history() == []


class TestPersistence:
    def test_save_and_load(self, tmp_path):
        h = History("andy", storage_dir=str(tmp_path), self_prompt_provider=lambda: "build a house")
        h.add("steve", "hi")
        h.add("andy", "hello")
        h.save()

        raw = json.loads((tmp_path / "andy" / "memory.json").read_text(encoding="utf-8"))
        assert raw["name"] == "andy"
        assert raw["self_prompt"] == "build a house"

        restored = History("andy", storage_dir=str(tmp_path))
        data = restored.load()
        assert data["self_prompt"] == "build a house"
        assert data["turns"] == h.turns
        assert restored.turns == h.turns

    def test_no_temp_file_left_behind(self, tmp_path):
        h = History("andy", storage_dir=str(tmp_path))
        h.add("steve", "hi")
        h.save()
        assert [p.name for p in (tmp_path / "andy").iterdir()] == ["memory.json"]

    def test_missing_self_prompt_saved_as_null(self, tmp_path):
        h = History("andy", storage_dir=str(tmp_path))
        h.save()
        assert History("andy", storage_dir=str(tmp_path)).load()["self_prompt"] is None

    def test_load_missing_file(self, tmp_path):
        h = History("andy", storage_dir=str(tmp_path))
        assert h.load() == {"turns": [], "self_prompt": None}

    def test_load_corrupt_file(self, tmp_path, capsys):
        path = tmp_path / "andy" / "memory.json"
        path.parent.mkdir()
        path.write_text("{not json", encoding="utf-8")

        h = History("andy", storage_dir=str(tmp_path))
        assert h.load() == {"turns": [], "self_prompt": None}
        assert "load failed" in capsys.readouterr().err

    def test_load_skips_malformed_turns(self, tmp_path):
        path = tmp_path / "andy" / "memory.json"
        path.parent.mkdir()
        path.write_text(
            json.dumps({"turns": [{"role": "user", "content": "steve: hi"}, {"oops": 1}, "text"]}),
            encoding="utf-8",
        )
        h = History("andy", storage_dir=str(tmp_path))
        assert h.load()["turns"] == [{"role": "user", "content": "steve: hi"}]

    def test_save_failure_is_logged(self, tmp_path, capsys):
        blocker = tmp_path / "blocked"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        h = History("andy", storage_dir=str(blocker))
        h.add("steve", "hi")
        h.save()
        assert "save failed" in capsys.readouterr().err

    def test_load_non_object_payload(self, tmp_path, capsys):
        path = tmp_path / "andy" / "memory.json"
        path.parent.mkdir()
        path.write_text("[]", encoding="utf-8")

        h = History("andy", storage_dir=str(tmp_path))
        assert h.load() == {"turns": [], "self_prompt": None}
        assert h.turns == []
        assert "expected an object" in capsys.readouterr().err
