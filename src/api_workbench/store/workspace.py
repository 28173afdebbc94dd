"""Workspace store: the Workspace -> Collection -> Request hierarchy on disk.

The whole hierarchy is persisted as one JSON array. Every mutator saves the
full document afterwards; a failed save raises ``StoreIOError`` but leaves
the in-memory list as it is, so the caller can retry.

Names are not unique. Every lookup by name resolves to the first match.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from api_workbench.errors import DecodeError, StoreIOError
from api_workbench.model.base import Collection, Request, Workspace

logger = logging.getLogger(__name__)

_DOCUMENT = TypeAdapter(list[Workspace])


class WorkspaceStore:
    """Owns the list of workspaces and the file it is persisted to."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.workspaces: list[Workspace] = []

    def load(self) -> list[Workspace]:
        """Read the store file. A missing file is an empty store."""
        if not self.path.exists():
            logger.debug("No store at %s, starting empty", self.path)
            self.workspaces = []
            return self.workspaces

        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StoreIOError(f"Cannot read {self.path}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Invalid JSON in {self.path}: {e}") from e
        if data is None:
            data = []
        try:
            self.workspaces = _DOCUMENT.validate_python(data)
        except ValidationError as e:
            raise DecodeError(f"Unexpected store layout in {self.path}: {e}") from e

        logger.debug("Loaded %d workspaces from %s", len(self.workspaces), self.path)
        return self.workspaces

    def save(self, workspaces: list[Workspace] | None = None) -> None:
        """Replace the store file with the given (or current) workspaces."""
        if workspaces is not None:
            self.workspaces = workspaces
        text = json.dumps(
            _DOCUMENT.dump_python(self.workspaces, mode="json"),
            indent=2,
            ensure_ascii=False,
        )

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreIOError(f"Cannot write {self.path}: {e}") from e

        logger.debug("Saved %d workspaces to %s", len(self.workspaces), self.path)

    # -- lookups -----------------------------------------------------------

    def find_workspace(self, name: str) -> Workspace | None:
        for ws in self.workspaces:
            if ws.name == name:
                return ws
        return None

    def find_collection(self, ws_name: str, name: str) -> Collection | None:
        ws = self.find_workspace(ws_name)
        if ws is None:
            return None
        for col in ws.collections:
            if col.name == name:
                return col
        return None

    def collection_at(self, ws_name: str, col_index: int) -> Collection | None:
        ws = self.find_workspace(ws_name)
        if ws is None or not 0 <= col_index < len(ws.collections):
            return None
        return ws.collections[col_index]

    def request_at(self, ws_name: str, col_index: int, req_index: int) -> Request | None:
        col = self.collection_at(ws_name, col_index)
        if col is None or not 0 <= req_index < len(col.requests):
            return None
        return col.requests[req_index]

    def find_request(self, ws_name: str, col_index: int, name: str) -> Request | None:
        col = self.collection_at(ws_name, col_index)
        if col is None:
            return None
        for req in col.requests:
            if req.name == name:
                return req
        return None

    # -- mutators ----------------------------------------------------------

    def add_workspace(self, name: str) -> Workspace:
        ws = Workspace(name=name)
        self.workspaces.append(ws)
        self.save()
        return ws

    def add_collection(self, ws_name: str, name: str) -> Collection | None:
        col = Collection(name=name)
        if not self.attach_collection(ws_name, col):
            return None
        return col

    def attach_collection(self, ws_name: str, collection: Collection) -> bool:
        ws = self.find_workspace(ws_name)
        if ws is None:
            return False
        ws.collections.append(collection)
        self.save()
        return True

    def add_request(self, ws_name: str, col_name: str, request: Request) -> bool:
        col = self.find_collection(ws_name, col_name)
        if col is None:
            return False
        col.requests.append(request)
        self.save()
        return True

    def rename_request(self, ws_name: str, col_index: int, req_index: int, new_name: str) -> bool:
        req = self.request_at(ws_name, col_index, req_index)
        if req is None:
            return False
        req.name = new_name
        self.save()
        return True

    def delete_request(self, ws_name: str, col_index: int, req_index: int) -> bool:
        """Remove one request; later requests shift down by one index."""
        col = self.collection_at(ws_name, col_index)
        if col is None or not 0 <= req_index < len(col.requests):
            return False
        del col.requests[req_index]
        self.save()
        return True
