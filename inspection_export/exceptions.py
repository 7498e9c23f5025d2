"""
Export engine exceptions.
"""


class ExportError(Exception):
    """Base exception for the export engine"""
    pass


class InvalidState(ExportError):
    """Operation on a document or session that is not open"""
    pass


class InvalidStyle(ExportError):
    """Unresolvable font, colour, alignment or size"""
    def __init__(self, message: str, token: object = None):
        self.token = token
        super().__init__(message)


class RangeError(ExportError, ValueError):
    """Slice indices out of bounds for dual-styled text"""
    def __init__(self, split_index: int, total_length: int, text_length: int):
        self.split_index = split_index
        self.total_length = total_length
        self.text_length = text_length
        super().__init__(
            f"Invalid slice: require 0 <= {split_index} <= {total_length} <= {text_length}"
        )


class SessionError(ExportError):
    """Archive session identifier misuse"""
    def __init__(self, session_id: str, message: str):
        self.session_id = session_id
        super().__init__(f"[{session_id}] {message}")


class UnknownSession(SessionError):
    """Session id is not live (never created, finalized or discarded)"""
    def __init__(self, session_id: str):
        super().__init__(session_id, "no live archive session")


class DuplicateSession(SessionError):
    """Session id already maps to a live session"""
    def __init__(self, session_id: str):
        super().__init__(session_id, "archive session already exists")


class MalformedPayload(ExportError):
    """Byte payload could not be decoded"""
    pass


class DeliveryFailure(ExportError):
    """Serialisation or hand-off to the host failed"""
    pass
