"""Transport decoding for byte payloads crossing the host boundary"""
import base64
import binascii
from typing import Union

from ..exceptions import MalformedPayload


def decode_payload(encoded: Union[str, bytes], what: str = "payload") -> bytes:
    """
    Decode a base64 text-safe payload.

    Args:
        encoded: base64 text (whitespace tolerated)
        what: description used in the error message

    Returns:
        Decoded bytes

    Raises:
        MalformedPayload: If the text is not valid base64
    """
    if isinstance(encoded, str):
        try:
            encoded = encoded.encode("ascii")
        except UnicodeEncodeError as e:
            raise MalformedPayload(f"{what} is not base64 text") from e

    compact = b"".join(encoded.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedPayload(f"{what} is not valid base64: {e}") from e


def encode_payload(data: bytes) -> str:
    """Encode bytes for transport"""
    return base64.b64encode(data).decode("ascii")
