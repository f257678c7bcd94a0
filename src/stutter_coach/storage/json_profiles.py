"""User profile persistence (JSON + fcntl.flock + atomic write)."""

import fcntl
import json
import os
import tempfile
from pathlib import Path
from urllib.parse import quote, unquote

from stutter_coach.models.user_profile import UserProfile
from stutter_coach.storage.base import KeyValueStore


class JsonProfileStore(KeyValueStore[UserProfile]):
    """One JSON file per user under ``directory``.

    Args:
        directory: Folder holding the profile files; created if missing.
    """

    def __init__(self, directory: Path):
        self.directory = directory
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, username: str) -> Path:
        return self.directory / f"{quote(username, safe='')}.json"

    async def get(self, key: str) -> UserProfile | None:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            data = json.load(f)
            fcntl.flock(f, fcntl.LOCK_UN)
        return UserProfile.model_validate(data)

    async def put(self, key: str, value: UserProfile) -> None:
        path = self._path(key)
        data = value.model_dump(mode="json")
        tmp = tempfile.NamedTemporaryFile(
            "w", dir=path.parent, delete=False, suffix=".tmp", encoding="utf-8"
        )
        try:
            with tmp:
                json.dump(data, tmp)
            os.replace(tmp.name, path)
        except Exception:
            Path(tmp.name).unlink(missing_ok=True)
            raise

    async def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    async def list_keys(self) -> list[str]:
        return sorted(unquote(p.stem) for p in self.directory.glob("*.json"))
