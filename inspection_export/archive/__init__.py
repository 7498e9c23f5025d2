"""Archive assembly: session-scoped zip bundles"""

from .session_store import ArchiveSession, ArchiveSessionManager, SessionState
from .writer import build_zip

__all__ = [
    'ArchiveSession',
    'ArchiveSessionManager',
    'SessionState',
    'build_zip',
]
