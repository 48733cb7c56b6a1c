# streamrent/repositories/session_store.py
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from streamrent.models.session import SessionSnapshot

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Single named record holding the logged-in user's snapshot."""

    def load(self) -> SessionSnapshot | None: ...

    def save(self, snapshot: SessionSnapshot) -> None: ...

    def clear(self) -> None: ...


class FileSessionStore:
    """
    Persist the session snapshot as a flat JSON file.

    Absence of the file means "logged out". A file that cannot be decoded or
    parsed is treated the same way (and logged), so a corrupt cache never
    blocks login.

    Reads and writes are synchronous: the record is a few hundred bytes on
    local disk. A remote snapshot store would need async methods instead.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> SessionSnapshot | None:
        if not self.path.exists():
            return None
        try:
            return SessionSnapshot.model_validate_json(self.path.read_bytes())
        except (OSError, UnicodeDecodeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return None

    def save(self, snapshot: SessionSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(snapshot.model_dump_json(), "utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
