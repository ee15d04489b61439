import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List

from lazytask.application.ports import StorageError, TaskRepository
from lazytask.core import Task, next_task_id

logger = logging.getLogger("lazytask.storage")

DEFAULT_TASK_FILE = "tasks.json"


class JsonTaskRepository(TaskRepository):
    """Whole-list JSON store: every save rewrites the file."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path or DEFAULT_TASK_FILE).expanduser()

    def load_all(self) -> List[Task]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read %s: %s", self.path, exc)
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring %s: expected a JSON array", self.path)
            return []
        tasks: List[Task] = []
        for item in raw:
            if not isinstance(item, dict) or "id" not in item:
                continue
            try:
                tasks.append(Task.from_dict(item))
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping malformed task %r: %s", item.get("id"), exc)
        return tasks

    def save_all(self, tasks: List[Task]) -> None:
        payload = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, indent=2)
        tmp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                delete=False,
                dir=str(self.path.parent),
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            ) as tmp:
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
                tmp_path = Path(tmp.name)
            os.replace(str(tmp_path), str(self.path))
        except OSError as exc:
            raise StorageError(f"could not write {self.path}: {exc}") from exc
        finally:
            if tmp_path and tmp_path.exists() and tmp_path != self.path:
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

    def next_id(self) -> int:
        return next_task_id(self.load_all())

    def compute_signature(self) -> int:
        try:
            return int(self.path.stat().st_mtime_ns)
        except OSError:
            return 0
