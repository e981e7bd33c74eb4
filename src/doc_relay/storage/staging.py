"""Ephemeral local staging of inbound uploads.

A staged file lives exactly as long as one upload attempt: the stage creates
it, :class:`doc_relay.storage.cloudinary.CloudinaryClient` deletes it.
"""

from __future__ import annotations

import logging
import re
import secrets
import time
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import BinaryIO, Optional

from doc_relay.exceptions import PayloadTooLargeError, StagingError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
MAX_NAME_LENGTH = 64
MAX_EXT_LENGTH = 10
MAX_NAME_ATTEMPTS = 8

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_EXT_CHARS = re.compile(r"[^A-Za-z0-9]+")


def sanitize_name(raw: Optional[str]) -> str:
    """Reduce a caller-supplied name to a single safe path component."""
    if not raw:
        return "default"
    # Only the final component of anything path-like
    name = re.split(r"[\\/]", raw)[-1]
    name = _UNSAFE_CHARS.sub("_", name)
    name = name.lstrip(".").strip("_")
    name = name[:MAX_NAME_LENGTH]
    return name or "default"


def extension_of(filename: Optional[str]) -> str:
    """Return ``.ext`` of the original filename, or ``""``."""
    if not filename:
        return ""
    suffix = PurePath(re.split(r"[\\/]", filename)[-1]).suffix
    cleaned = _EXT_CHARS.sub("", suffix)[:MAX_EXT_LENGTH]
    return f".{cleaned.lower()}" if cleaned else ""


@dataclass
class StagedFile:
    path: Path
    original_filename: Optional[str] = None
    size: int = 0
    _released: bool = field(default=False, repr=False)

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> bool:
        """Delete the staged bytes. Safe to call more than once."""
        if self._released:
            return False
        self._released = True
        try:
            self.path.unlink()
            return True
        except FileNotFoundError:
            return False


class TemporaryStage:
    def __init__(self, base_dir: str | Path, *, max_bytes: Optional[int] = None):
        self.base_dir = Path(base_dir)
        self.max_bytes = max_bytes

    def ensure_dir(self) -> Path:
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StagingError(
                f"Cannot create staging directory: {exc.strerror or exc}", operation="stage"
            ) from exc
        return self.base_dir

    def make_name(self, suggested_name: Optional[str], original_filename: Optional[str]) -> str:
        stamp = int(time.time() * 1000)
        suffix = secrets.randbelow(10**9)
        return f"{sanitize_name(suggested_name)}-{stamp}-{suffix}{extension_of(original_filename)}"

    def _open_unique(self, suggested_name: Optional[str], original_filename: Optional[str]):
        for _ in range(MAX_NAME_ATTEMPTS):
            path = self.base_dir / self.make_name(suggested_name, original_filename)
            try:
                return path, open(path, "xb")
            except FileExistsError:
                continue
            except OSError as exc:
                raise StagingError(
                    f"Cannot open staged file: {exc.strerror or exc}", operation="stage"
                ) from exc
        raise StagingError("Could not allocate a unique staged file name", operation="stage")

    def stage(
        self,
        stream: BinaryIO,
        suggested_name: Optional[str] = None,
        original_filename: Optional[str] = None,
    ) -> StagedFile:
        """Copy ``stream`` to a fresh file under the staging directory.

        Raises:
            StagingError: reading the stream or the local write failed;
                nothing is left on disk.
            PayloadTooLargeError: the stream exceeded ``max_bytes``.
        """
        self.ensure_dir()
        path, fh = self._open_unique(suggested_name, original_filename)
        staged = StagedFile(path=path, original_filename=original_filename)
        try:
            with fh:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    staged.size += len(chunk)
                    if self.max_bytes is not None and staged.size > self.max_bytes:
                        raise PayloadTooLargeError(
                            f"Upload exceeds {self.max_bytes} bytes", operation="stage"
                        )
                    fh.write(chunk)
        except PayloadTooLargeError:
            staged.release()
            raise
        except OSError as exc:
            staged.release()
            raise StagingError(
                f"Writing staged file failed: {exc.strerror or exc}",
                operation="stage",
                identifier=path.name,
            ) from exc
        except Exception as exc:
            # e.g. ValueError from reading an already closed upload stream
            staged.release()
            raise StagingError(
                f"Reading upload stream failed: {type(exc).__name__}",
                operation="stage",
                identifier=path.name,
            ) from exc
        except BaseException:
            staged.release()
            raise
        logger.debug("Staged %s (%d bytes)", path.name, staged.size)
        return staged


__all__ = ["StagedFile", "TemporaryStage", "sanitize_name", "extension_of"]
