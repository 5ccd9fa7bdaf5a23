"""QR code generation for registration confirmations and event passes"""

import io
import json
import logging
from typing import Any, Dict

import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_H

logger = logging.getLogger(__name__)

QR_SIZE_PX = 300


def generate_qr_png(payload: Dict[str, Any], size: int = QR_SIZE_PX) -> bytes:
    """
    Encode a JSON payload as a black-on-white PNG QR code

    Args:
        payload: JSON-serializable data to embed
        size: Edge length of the square image in pixels

    Returns:
        PNG bytes
    """
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_H, border=1, box_size=10)
    qr.add_data(json.dumps(payload, default=str))
    qr.make(fit=True)

    raw = io.BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(raw, format="PNG")
    raw.seek(0)

    with Image.open(raw) as image:
        resized = image.convert("RGB").resize((size, size), Image.NEAREST)
        out = io.BytesIO()
        resized.save(out, format="PNG")

    logger.debug(f"Generated QR code ({len(out.getvalue())} bytes)")
    return out.getvalue()
