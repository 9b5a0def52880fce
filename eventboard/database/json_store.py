"""
Flat-file collection storage.
Provides get_store() for use by services.

Every collection is read and written as a whole. There is no locking: two
concurrent writers race and the last full write wins.
"""

import copy
import json
import logging
import os
import re
import tempfile
from typing import Any, Dict, List

from flask import current_app
from dotenv import load_dotenv

# Load .env variables from the project root
load_dotenv()

DATA_DIR = os.getenv("DATA_DIR", "database")

COLLECTION_NAME = re.compile(r"^[a-z_]+$")

Record = Dict[str, Any]


class StorageError(Exception):
    """Raised when a collection cannot be read or written."""


class CollectionStore:
    """
    Whole-collection storage interface.

    Subclasses implement read() and write() for a named collection.
    Callers always load the full list, change it in memory and write the
    full list back.
    """

    def read(self, collection: str) -> List[Record]:
        raise NotImplementedError

    def write(self, collection: str, records: List[Record]) -> None:
        raise NotImplementedError

    def ensure(self, collection: str) -> None:
        """Create an empty collection if it does not exist yet."""
        raise NotImplementedError

    @staticmethod
    def check_name(collection: str) -> None:
        if not COLLECTION_NAME.match(collection or ""):
            raise StorageError(f"Invalid collection name: {collection!r}")


class JsonFileStore(CollectionStore):
    """
    Stores each collection as <data_dir>/<collection>.json.

    A missing file reads as an empty collection. Writes go to a temporary
    file in the same directory which is then renamed over the target.
    """

    def __init__(self, data_dir: str = DATA_DIR) -> None:
        self.data_dir = data_dir

    def path_for(self, collection: str) -> str:
        self.check_name(collection)
        return os.path.join(self.data_dir, f"{collection}.json")

    def read(self, collection: str) -> List[Record]:
        path = self.path_for(collection)
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logging.error(f"Error reading collection {collection}: {e}")
            raise StorageError(f"Could not read {collection}") from e

        if not isinstance(data, list):
            raise StorageError(f"Collection {collection} is not a JSON array")
        if not all(isinstance(record, dict) for record in data):
            raise StorageError(f"Collection {collection} holds a non-object record")
        return data

    def write(self, collection: str, records: List[Record]) -> None:
        path = self.path_for(collection)
        tmp_path = None
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.data_dir, prefix=f".{collection}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            logging.error(f"Error writing collection {collection}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError(f"Could not write {collection}") from e

    def ensure(self, collection: str) -> None:
        if not os.path.exists(self.path_for(collection)):
            self.write(collection, [])


class MemoryStore(CollectionStore):
    """
    Keeps collections in a dict. Used by tests and throwaway instances.

    Records are deep-copied on the way in and out so callers cannot mutate
    stored state without calling write().
    """

    def __init__(self, initial: Dict[str, List[Record]] = None) -> None:
        self._collections: Dict[str, List[Record]] = {}
        for name, records in (initial or {}).items():
            self.write(name, records)

    def read(self, collection: str) -> List[Record]:
        self.check_name(collection)
        return copy.deepcopy(self._collections.get(collection, []))

    def write(self, collection: str, records: List[Record]) -> None:
        self.check_name(collection)
        self._collections[collection] = copy.deepcopy(list(records))

    def ensure(self, collection: str) -> None:
        self.check_name(collection)
        self._collections.setdefault(collection, [])


def get_store() -> CollectionStore:
    """
    Returns the store configured on the running application.

    Usage:
        store = get_store()
        events = store.read("events")
        ...
        store.write("events", events)

    Returns:
        CollectionStore: The instance registered under app.config["STORE"].
    """
    return current_app.config["STORE"]
