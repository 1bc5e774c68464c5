import json
from pathlib import Path
from typing import Any, Dict, Union


class JsonlLogger:
    """Appends one JSON object per line; parent directories are created lazily."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def write(self, record: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")

    def read_all(self) -> list:
        if not self.path.exists():
            return []
        records = []
        with self.path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    records.append(json.loads(line))
        return records
