"""
Collection bootstrap.

Makes sure every collection the services use exists before the gateway
starts serving, so a fresh DATA_DIR does not need hand-made JSON files.

Run directly to initialise the configured DATA_DIR:

    python -m eventboard.database.init_db
"""

import logging

from eventboard.database.json_store import CollectionStore, JsonFileStore

COLLECTIONS = ("users", "organizations", "events")


def init_db(store: CollectionStore) -> None:
    """
    Create empty collections for any that are missing.

    Args:
        store (CollectionStore): The backend to initialise.
    """
    for name in COLLECTIONS:
        store.ensure(name)
    logging.info(f"Collections ready: {', '.join(COLLECTIONS)}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")
    json_store = JsonFileStore()
    init_db(json_store)
    print(f"--- Initialised collections in {json_store.data_dir} ---")
