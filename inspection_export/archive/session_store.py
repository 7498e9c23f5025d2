"""In-memory archive sessions"""
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from ..exceptions import DeliveryFailure, DuplicateSession, MalformedPayload, UnknownSession
from ..utils.payloads import decode_payload
from .writer import build_zip


logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Archive session lifecycle"""
    OPEN = "open"
    FINALIZED = "finalized"
    DISCARDED = "discarded"


@dataclass
class ArchiveSession:
    """Named byte entries destined for one archive"""
    session_id: str
    entries: Dict[str, bytes] = field(default_factory=dict)
    state: SessionState = SessionState.OPEN
    created_at: float = field(default_factory=time.monotonic)

    @property
    def total_bytes(self) -> int:
        return sum(len(data) for data in self.entries.values())


class ArchiveSessionManager:
    """
    Maps caller-supplied session ids to independent archive sessions.

    Different ids never contend. Calls against one id must be serialised
    by the caller; the lock only guards the mapping itself.
    """

    def __init__(self):
        self._sessions: Dict[str, ArchiveSession] = {}
        self._lock = threading.Lock()

    def create(self, session_id: str) -> ArchiveSession:
        """
        Open a new empty session.

        Raises:
            DuplicateSession: If the id is already live
        """
        with self._lock:
            if session_id in self._sessions:
                raise DuplicateSession(session_id)
            session = ArchiveSession(session_id=session_id)
            self._sessions[session_id] = session
        logger.info(f"Archive session created: {session_id}")
        return session

    def get(self, session_id: str) -> ArchiveSession:
        """Get a live session or raise UnknownSession"""
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSession(session_id)
        return session

    def add_entry(self, session_id: str, name: str, encoded: Union[str, bytes]) -> int:
        """
        Add a transport-encoded (base64) entry. Re-adding a name replaces it.

        Returns:
            Decoded size in bytes
        """
        session = self.get(session_id)
        data = decode_payload(encoded, f"entry '{name}'")
        return self._store(session, name, data)

    def add_entry_bytes(self, session_id: str, name: str, data: bytes) -> int:
        """Add an entry that is already raw bytes (e.g. a finished PDF)"""
        session = self.get(session_id)
        return self._store(session, name, bytes(data))

    def _store(self, session: ArchiveSession, name: str, data: bytes) -> int:
        if not name:
            raise MalformedPayload("Entry name must not be empty")
        if name in session.entries:
            logger.debug(f"[{session.session_id}] replacing entry {name}")
        session.entries[name] = data
        return len(data)

    def finalize(self, session_id: str) -> bytes:
        """
        Serialise all entries into one zip and evict the session.

        Single use: a second call fails with UnknownSession.
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise UnknownSession(session_id)
        session.state = SessionState.FINALIZED

        try:
            data = build_zip(session.entries)
        except Exception as e:
            logger.error(f"Archive {session_id} serialisation failed: {e}")
            raise DeliveryFailure(f"Could not build archive {session_id}: {e}") from e

        logger.info(
            f"Archive session finalized: {session_id} "
            f"({len(session.entries)} entries, {len(data)} bytes)"
        )
        return data

    def discard(self, session_id: str) -> bool:
        """Evict a session without producing output"""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.state = SessionState.DISCARDED
        logger.info(f"Archive session discarded: {session_id}")
        return True

    def cleanup_stale(self, max_age_seconds: float, now: Optional[float] = None) -> int:
        """Discard sessions open longer than max_age_seconds"""
        now = time.monotonic() if now is None else now
        stale = [
            session_id for session_id, session in list(self._sessions.items())
            if now - session.created_at > max_age_seconds
        ]
        for session_id in stale:
            self.discard(session_id)
        return len(stale)

    def live_sessions(self) -> List[str]:
        return list(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
