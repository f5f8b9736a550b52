"""Local session cache port and adapters.

The cache is advisory: it is written after every session mutation and read
once when a session is restored. Its contents are always reconciled against
the resource store, and a cache that cannot be read or written never fails
the operation that triggered it.
"""

from abc import ABC, abstractmethod
from pathlib import Path

import structlog
from pydantic import ValidationError as PydanticValidationError

from storefront.session.state import SessionState

logger = structlog.get_logger(__name__)


class SessionCache(ABC):
    @abstractmethod
    def load(self, session_id: str) -> SessionState | None:
        """Return the cached state, or None when nothing usable is cached."""
        ...

    @abstractmethod
    def save(self, state: SessionState) -> None: ...

    @abstractmethod
    def delete(self, session_id: str) -> None: ...


class MemorySessionCache(SessionCache):
    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        self.fail_writes: bool = False

    def load(self, session_id: str) -> SessionState | None:
        raw = self._entries.get(session_id)
        return SessionState.model_validate_json(raw) if raw is not None else None

    def save(self, state: SessionState) -> None:
        if self.fail_writes:
            raise OSError("session cache is read-only")
        self._entries[state.session_id] = state.model_dump_json()

    def delete(self, session_id: str) -> None:
        self._entries.pop(session_id, None)


class JsonFileSessionCache(SessionCache):
    """One JSON document per session under ``cache_dir``."""

    def __init__(self, cache_dir: str | Path) -> None:
        self._dir = Path(cache_dir)

    def _path(self, session_id: str) -> Path:
        return self._dir / f"{Path(session_id).name}.json"

    def load(self, session_id: str) -> SessionState | None:
        path = self._path(session_id)
        try:
            return SessionState.model_validate_json(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, PydanticValidationError) as exc:
            logger.warning("Discarding unreadable session cache", session_id=session_id, error=str(exc))
            return None

    def save(self, state: SessionState) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._path(state.session_id)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(state.model_dump_json(), encoding="utf-8")
        tmp.replace(path)

    def delete(self, session_id: str) -> None:
        self._path(session_id).unlink(missing_ok=True)


def build_session_cache(settings) -> SessionCache:
    if settings.session.cache == "file":
        return JsonFileSessionCache(settings.session.cache_dir)
    return MemorySessionCache()
