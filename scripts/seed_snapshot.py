"""Write the demo school to a JSON snapshot.

Point SNAPSHOT_PATH at the written file to start the app with that data.
"""

from __future__ import annotations

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from rollcall.database.bootstrap import seed_demo_data
from rollcall.database.store import AttendanceStore


def main(argv: Optional[list[str]] = None) -> Path:
    args = sys.argv[1:] if argv is None else argv
    if args:
        out_file = Path(args[0])
    else:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        out_file = REPO_ROOT / "backups" / f"demo_snapshot_{ts}.json"
    out_file.parent.mkdir(parents=True, exist_ok=True)

    store = AttendanceStore.create()
    counts = seed_demo_data(store)
    out_file.write_text(json.dumps(store.export_snapshot(), indent=2), encoding="utf-8")

    print(f"OK: Demo snapshot written -> {out_file} {counts}")
    return out_file


if __name__ == "__main__":
    main()
