import json
import threading
from pathlib import Path
from typing import Dict, Optional, Union

PathLike = Union[str, Path]


def file_mtime_ms(path: PathLike) -> int:
    """Modification time of `path` in epoch milliseconds. Stat failures propagate."""
    return Path(path).stat().st_mtime_ns // 1_000_000


class CacheStore:
    """
    Last-seen modification times of processed inputs, one JSON file per
    configuration fingerprint: `<cache_dir>/<fingerprint>.json` holding
    `{"files": {"<absolute path>": <epoch millis>}}`.

    Every membership query also records the file's current mtime, so the
    index is written to as a side effect of `is_modified`. All mutations go
    through one lock.
    """

    def __init__(self, cache_dir: PathLike, fingerprint: str) -> None:
        self.cache_dir = Path(cache_dir)
        self.fingerprint = fingerprint
        self.files: Dict[str, int] = {}
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self.cache_dir / f"{self.fingerprint}.json"

    @classmethod
    def load(cls, cache_dir: PathLike, fingerprint: str) -> "CacheStore":
        """Open the index for `fingerprint`, starting fresh when no file exists yet."""
        store = cls(cache_dir, fingerprint)
        if store.path.exists():
            with store.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            store.files = {str(k): int(v) for k, v in (data.get("files") or {}).items()}
        return store

    def get_and_update(self, path: PathLike, mtime: int) -> Optional[int]:
        """Atomically record `mtime` for `path` and return the previous value."""
        key = str(path)
        with self._lock:
            previous = self.files.get(key)
            self.files[key] = mtime
        return previous

    def is_modified(self, path: PathLike) -> bool:
        current = file_mtime_ms(path)
        previous = self.get_and_update(path, current)
        return previous != current

    def save(self) -> Path:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        with self._lock:
            payload = {"files": dict(sorted(self.files.items()))}
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        return self.path
