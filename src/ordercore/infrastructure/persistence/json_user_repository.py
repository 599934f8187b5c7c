"""JSON-file-backed user directory."""

from __future__ import annotations

from pathlib import Path

from ordercore.domain.model.user import User
from ordercore.domain.repository.catalog import UserDirectory
from ordercore.infrastructure.persistence.json_file import JsonFile


class JsonUserRepository(UserDirectory):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty=[])

    def get_user(self, user_id: str) -> User | None:
        for raw in self._file.load():
            if raw["id"] == user_id:
                return User(id=raw["id"], name=raw["name"])
        return None

    def list_all(self) -> list[User]:
        return [User(id=raw["id"], name=raw["name"]) for raw in self._file.load()]

    def save(self, user: User) -> None:
        with self._file.locked():
            users = [raw for raw in self._file.load() if raw["id"] != user.id]
            users.append({"id": user.id, "name": user.name})
            self._file.persist(users)
