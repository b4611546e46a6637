import json

from rollcall.database.snapshot import load_snapshot_file
from rollcall.database.store import AttendanceStore
from scripts.seed_snapshot import main


def test_script_writes_loadable_snapshot(tmp_path):
    out = main([str(tmp_path / "nested" / "demo.json")])

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["version"] == "1.0.0"

    store = AttendanceStore.create()
    assert load_snapshot_file(store.db, out)["attendance"] == 15
