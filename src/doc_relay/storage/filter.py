from __future__ import annotations

from typing import Iterable, Optional

from doc_relay.exceptions import UnsupportedMediaTypeError


def _bare(media_type: str) -> str:
    # "application/PDF; charset=binary" -> "application/pdf"
    return media_type.split(";", 1)[0].strip().lower()


class ContentFilter:
    """Allow-list check on the client-declared media type.

    The declared type is untrusted; this is a policy gate, not content
    sniffing. Callers must run it before anything is staged.
    """

    def __init__(self, allowed: Iterable[str]):
        self.allowed: frozenset[str] = frozenset(_bare(m) for m in allowed)

    def accept(self, media_type: Optional[str]) -> bool:
        if not media_type:
            return False
        return _bare(media_type) in self.allowed

    def ensure(self, media_type: Optional[str]) -> str:
        if not self.accept(media_type):
            raise UnsupportedMediaTypeError(media_type, self.allowed)
        return _bare(media_type)  # type: ignore[arg-type]


__all__ = ["ContentFilter"]
