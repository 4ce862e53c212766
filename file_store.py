"""
Flat-file persistence for users and reviews
-------------------------------------------
Two JSON documents live in the data directory:

- users.json   : list of user records, bootstrapped with sample users when absent or unreadable
- reviews.json : list of review records, created empty when absent

Whole documents are read and written on every call. Writes go to a sibling
temp file first and are moved into place with os.replace, so readers never
see a half-written document. Nothing here serialises concurrent writers.
"""

from __future__ import annotations

import json
import os
import shutil
from pathlib import Path
from typing import Any, Dict, List

import structlog
from pydantic import ValidationError as PydanticValidationError

from config import settings
from errors import StorageCorruptionError
from models import SAMPLE_USERS, User
from utils import epoch_ms

logger = structlog.get_logger("app")


class FileStore:
    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)
        self.users_file = self.data_dir / settings.users_file_name
        self.reviews_file = self.data_dir / settings.reviews_file_name

    # ---------- Directory ----------

    def ensure_data_dir(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.error("Failed to create data dir", data_dir=str(self.data_dir))
            raise

    # ---------- Users ----------

    def load_users(self) -> List[User]:
        """Read users.json; if it cannot be read or parsed, persist and return the sample users.

        Records that parse but do not fit the user schema are skipped; the file is left as is.
        """
        self.ensure_data_dir()
        try:
            raw = json.loads(self.users_file.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise StorageCorruptionError("users document is not a list")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, StorageCorruptionError) as exc:
            logger.warning(
                "users.json missing or unreadable - creating sample users.json",
                path=str(self.users_file),
                reason=str(exc),
            )
            sample = [u.model_copy() for u in SAMPLE_USERS]
            self._write_json_atomic(self.users_file, [u.model_dump(by_alias=True) for u in sample])
            return sample

        users: List[User] = []
        for position, item in enumerate(raw):
            try:
                users.append(User.model_validate(item))
            except PydanticValidationError as exc:
                logger.warning(
                    "Skipping invalid user record",
                    path=str(self.users_file),
                    position=position,
                    reason=str(exc),
                )
        return users

    # ---------- Reviews ----------

    def read_reviews(self) -> List[Dict[str, Any]]:
        """Read reviews.json, recovering from a missing or corrupt file with an empty list."""
        self.ensure_data_dir()
        try:
            return self._read_review_list()
        except FileNotFoundError:
            self.write_reviews([])
            return []
        except StorageCorruptionError as exc:
            logger.error("Failed to read reviews.json", path=str(self.reviews_file), reason=str(exc))
            self._backup_corrupt_reviews()
            self.write_reviews([])
            return []

    def write_reviews(self, reviews: List[Dict[str, Any]]) -> None:
        self._write_json_atomic(self.reviews_file, reviews)

    def _read_review_list(self) -> List[Dict[str, Any]]:
        try:
            raw = self.reviews_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageCorruptionError(str(exc)) from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageCorruptionError(str(exc)) from exc
        if not isinstance(data, list):
            raise StorageCorruptionError("reviews document is not a list")
        return data

    def _backup_corrupt_reviews(self) -> None:
        backup = self.reviews_file.with_name(f"{self.reviews_file.name}.corrupt.{epoch_ms()}")
        try:
            shutil.copyfile(self.reviews_file, backup)
            logger.warning("Backed up corrupted reviews.json", backup=str(backup))
        except OSError as exc:
            logger.warning("Could not back up corrupted reviews.json", reason=str(exc))

    # ---------- Atomic write ----------

    def _write_json_atomic(self, path: Path, payload: Any) -> None:
        tmp_path = path.with_name(path.name + settings.temp_suffix)
        tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, path)
