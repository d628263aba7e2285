"""Single JSON document store.

Every mutation is a full read-modify-write of one file, serialised by a
``FileLock`` held for the whole cycle so concurrent writers (threads or
worker processes) cannot lose each other's updates.
"""

import json
import logging
import os
import tempfile
from contextlib import contextmanager

from filelock import FileLock, Timeout
from flask import current_app

from utils.errors import StoreBusyError, StoreError

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("bookings", "courts", "timeSlots", "courtRates", "users")
EXTENSION_KEY = "json_store"


class JsonStore:
    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        path = os.path.abspath(app.config["DATA_FILE"])
        timeout = app.config.get("STORE_LOCK_TIMEOUT", 10)
        app.extensions[EXTENSION_KEY] = {"path": path, "lock_timeout": timeout}

    @property
    def _state(self) -> dict:
        try:
            return current_app.extensions[EXTENSION_KEY]
        except KeyError:
            raise RuntimeError("JsonStore is not initialised for this app; call db.init_app(app)")

    @property
    def path(self) -> str:
        return self._state["path"]

    def _read_file(self):
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                doc = json.load(fh)
        except json.JSONDecodeError as exc:
            logger.error("Data file %s is not valid JSON: %s", self.path, exc)
            raise StoreError("Data file is corrupted")
        if not isinstance(doc, dict):
            raise StoreError("Data file is corrupted")
        return doc

    def _load(self):
        """Returns (document, seeded)."""
        doc = self._read_file()
        if doc is not None and all(k in doc for k in REQUIRED_KEYS):
            return doc, False

        from utils.seed import seed_document

        logger.info("Initialising default data in %s", self.path)
        return seed_document(doc or {}), True

    def _write(self, doc: dict) -> None:
        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".db-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(doc, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            logger.error("Failed to write data file %s: %s", self.path, exc)
            raise StoreError("Could not write to data file")

    def read(self) -> dict:
        doc, seeded = self._load()
        if not seeded:
            return doc
        with self.transaction() as fresh:
            pass
        return fresh

    @contextmanager
    def transaction(self):
        """
        Lock the document, yield it for in-place modification and write it
        back on a clean exit. An exception inside the block discards changes.
        """
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        # new lock object per transaction
        lock = FileLock(self.path + ".lock", timeout=self._state["lock_timeout"])
        try:
            lock.acquire()
        except Timeout:
            logger.warning("Timed out waiting for lock on %s", self.path)
            raise StoreBusyError("The booking store is busy. Please try again.")
        try:
            doc, _ = self._load()
            yield doc
            self._write(doc)
        finally:
            lock.release()


db = JsonStore()
