# admission_portal/services/blob_store.py
"""Local-directory blob store for uploaded document files."""
from __future__ import annotations

import logging
import os
import secrets
import time
from pathlib import Path
from typing import BinaryIO

from admission_portal.core.config import settings

log = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class BlobTooLarge(Exception):
    pass


class LocalBlobStore:
    def __init__(self, root: str):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        # keys are bare file names; refuse anything that would escape the root
        name = Path(key).name
        if not name or name != key:
            raise ValueError(f"Invalid blob key: {key!r}")
        return self.root / name

    def new_key(self, original_name: str, prefix: str = "file") -> str:
        ext = Path(original_name or "").suffix.lower()
        suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        return f"{prefix}-{suffix}{ext}"

    def put(self, fileobj: BinaryIO, original_name: str, max_bytes: int) -> str:
        """Copy fileobj into the store; BlobTooLarge if it exceeds max_bytes (nothing is kept)."""
        self.root.mkdir(parents=True, exist_ok=True)
        key = self.new_key(original_name)
        path = self._path(key)
        written = 0
        try:
            with open(path, "wb") as out:
                while True:
                    chunk = fileobj.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > max_bytes:
                        raise BlobTooLarge(f"File exceeds {max_bytes} bytes")
                    out.write(chunk)
        except BaseException:
            path.unlink(missing_ok=True)
            raise
        log.info("Stored blob %s (%d bytes)", key, written)
        return key

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def delete(self, key: str) -> None:
        """Release a blob. Releasing a blob that is already gone is not an error."""
        path = self._path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            log.warning("Blob %s already absent", key)
            return
        log.info("Released blob %s", key)


def get_blob_store() -> LocalBlobStore:
    return LocalBlobStore(settings.UPLOAD_DIR)
