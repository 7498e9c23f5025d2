"""Zip serialisation of archive entries"""
import io
from typing import Mapping
from zipfile import ZIP_DEFLATED, ZipFile, ZipInfo


# Fixed entry timestamp so identical entries give identical archives
EPOCH_ZIP_DT = (1980, 1, 1, 0, 0, 0)


def build_zip(entries: Mapping[str, bytes]) -> bytes:
    """
    Serialise entries into one zip archive.

    Entries are written in name order, DEFLATE-compressed.
    """
    buffer = io.BytesIO()
    with ZipFile(buffer, mode="w", compression=ZIP_DEFLATED) as zf:
        for name, content in sorted(entries.items(), key=lambda kv: kv[0]):
            info = ZipInfo(name)
            info.date_time = EPOCH_ZIP_DT
            info.compress_type = ZIP_DEFLATED
            zf.writestr(info, content)
    return buffer.getvalue()
