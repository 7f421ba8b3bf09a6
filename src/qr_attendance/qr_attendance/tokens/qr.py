"""QR payload codec and image rendering.

Wire format (exact): {"sessionId": "<id>", "token": "<hex>"}
"""

from __future__ import annotations

import base64
import io
import json
from dataclasses import dataclass
from typing import BinaryIO

import qrcode
from PIL import Image

from ..core.exceptions import InvalidToken, ValidationError


@dataclass(frozen=True)
class QrPayload:
    session_id: str
    token: str

    def to_json(self) -> str:
        return json.dumps({"sessionId": self.session_id, "token": self.token})


def parse_payload(text: object) -> QrPayload:
    """Parse scanned or pasted payload text. Anything malformed is an InvalidToken."""

    if not isinstance(text, str) or not text.strip():
        raise InvalidToken("empty payload")
    try:
        data = json.loads(text.strip())
    except ValueError:
        raise InvalidToken("payload is not JSON")

    if not isinstance(data, dict):
        raise InvalidToken("payload is not an object")
    session_id = data.get("sessionId")
    token = data.get("token")
    if not isinstance(session_id, str) or not session_id or not isinstance(token, str) or not token:
        raise InvalidToken("payload is missing sessionId/token")
    return QrPayload(session_id=session_id, token=token)


def render_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=1,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def to_data_url(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def decode_image(stream: BinaryIO) -> str:
    """Return the text of the first QR code found in an uploaded photo."""

    # pyzbar loads the zbar shared library on import; only photo scans need it.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except (OSError, ValueError):
        raise ValidationError("file is not a readable image")

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("no QR code found in image")
    return decoded[0].data.decode("utf-8").strip()
