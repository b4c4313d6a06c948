"""Durable per-step progress checkpoints."""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Set

logger = logging.getLogger(__name__)


class ProgressStore(ABC):
    """
    Base class for progress stores.

    A store records, per step, which documents were fully migrated. A
    document recorded as processed is never migrated again by that step
    until the step's progress is reset.
    """

    @abstractmethod
    def get_processed_entities(self, step_id: str) -> Set[str]:
        """Documents already fully migrated by a step."""
        pass

    @abstractmethod
    def add_processed_entity(self, step_id: str, document: str) -> None:
        """Mark a document as fully migrated by a step."""
        pass

    @abstractmethod
    def reset(self, step_id: str) -> None:
        """Forget all progress of a step."""
        pass


class InMemoryProgressStore(ProgressStore):
    """Progress store that lives as long as the process."""

    def __init__(self):
        self._processed: Dict[str, List[str]] = {}

    def get_processed_entities(self, step_id: str) -> Set[str]:
        return set(self._processed.get(step_id, []))

    def add_processed_entity(self, step_id: str, document: str) -> None:
        entities = self._processed.setdefault(step_id, [])
        if document not in entities:
            entities.append(document)

    def reset(self, step_id: str) -> None:
        self._processed.pop(step_id, None)


class JsonFileProgressStore(ProgressStore):
    """
    Progress store persisted to a JSON file.

    File layout::

        {"steps": {"<step_id>": {"processed": ["doc", ...], "updated_at": "..."}}}

    Every change rewrites the whole file through a temporary file and an
    atomic rename, so an interrupted write leaves the previous checkpoint.
    """

    def __init__(self, file_path: str):
        """
        Initialize the store.

        Args:
            file_path: Path of the JSON progress file
        """
        self.file_path = Path(file_path)

    def _load(self) -> Dict[str, Any]:
        if not self.file_path.exists():
            return {"steps": {}}
        with open(self.file_path, 'r') as f:
            data = json.load(f)
        data.setdefault("steps", {})
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.file_path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.file_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_processed_entities(self, step_id: str) -> Set[str]:
        step = self._load()["steps"].get(step_id, {})
        return set(step.get("processed", []))

    def add_processed_entity(self, step_id: str, document: str) -> None:
        data = self._load()
        step = data["steps"].setdefault(step_id, {"processed": []})
        if document not in step["processed"]:
            step["processed"].append(document)
        step["updated_at"] = datetime.utcnow().isoformat()
        self._save(data)
        logger.debug(f"Checkpoint: {step_id}/{document} done")

    def reset(self, step_id: str) -> None:
        data = self._load()
        if data["steps"].pop(step_id, None) is not None:
            self._save(data)
            logger.info(f"Reset progress of step {step_id}")
