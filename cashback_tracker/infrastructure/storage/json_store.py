"""Whole-document JSON file storage with atomic replace"""

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger(__name__)


class JsonDocument:
    """
    One JSON file holding one logical collection.

    Reads are whole-file; a missing or unparsable file is treated as absent and
    yields a fresh default. Writes serialize the whole document to a sibling
    ``.tmp`` file and ``os.replace`` it into place, so readers never observe a
    half-written file. Concurrent writers are NOT serialized: two
    read-modify-write cycles can race and the later write wins.
    """

    def __init__(self, path: Path, default_factory: Callable[[], Any], repair: bool = False):
        self.path = Path(path)
        self.default_factory = default_factory
        self.repair = repair

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Any:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return self.default_factory()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(
                "Unreadable JSON document, using defaults",
                extra={"path": str(self.path), "error": str(e)},
            )
            default = self.default_factory()
            if self.repair:
                self.save(default)
            return default

    def save(self, data: Any) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, self.path)
        except Exception:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise

    def ensure(self) -> bool:
        """Seed the file with its default if missing. Returns True if created."""
        if self.exists():
            return False
        self.save(self.default_factory())
        logger.info("Created data file", extra={"path": str(self.path)})
        return True
