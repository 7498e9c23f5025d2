"""Download filename helpers"""
import re
import unicodedata
from urllib.parse import quote

# Characters the host cannot accept in a download name
_UNSAFE_CHARS = re.compile(r"[*'\",&#^@:;+]")


def sanitize_filename(filename: str) -> str:
    """Replace every unsafe character with an underscore.

    Applies identically to document, archive and image downloads.

    >>> sanitize_filename("Report #1: Q&A.zip")
    'Report _1_ Q_A.zip'
    """
    return _UNSAFE_CHARS.sub("_", filename)


def content_disposition(filename: str) -> str:
    """
    Attachment header value safe for latin-1 header encoding.

    Carries an ASCII fallback name plus the UTF-8 name (RFC 5987) when the
    two differ.

    >>> content_disposition("Summary_Nguyễn.pdf")
    'attachment; filename="Summary_Nguyen.pdf"; filename*=UTF-8\\'\\'Summary_Nguy%E1%BB%85n.pdf'
    """
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = fallback.replace("\\", "_").replace('"', "_") or "download"
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
