# qr_resolver.py
# Maps a scanned QR payload to the campus node it is posted at.

import logging
from typing import Optional

import cv2
import numpy as np

from .models import CampusMap, CampusNode
from .nav_config import QR_CODE_PREFIX

logger = logging.getLogger(__name__)


def is_valid_qr_payload(data: Optional[str], prefix: str = QR_CODE_PREFIX) -> bool:
    return bool(data) and data.startswith(prefix)


def process_qr_code(
    data: Optional[str], campus_map: CampusMap, prefix: str = QR_CODE_PREFIX
) -> Optional[CampusNode]:
    """
    Validate a scanned payload and find its node.

    Args:
        data:       Decoded QR text.
        campus_map: Map to search.
        prefix:     Required payload prefix.

    Returns:
        Matching CampusNode, or None for foreign or unknown codes.
    """
    if not is_valid_qr_payload(data, prefix):
        logger.debug(f"Ignoring QR payload without '{prefix}' prefix: {data!r}")
        return None

    for node in campus_map.nodes.values():
        if node.qr_code == data:
            return node

    logger.debug(f"No campus node carries QR code {data!r}.")
    return None


def decode_qr_frame(rgb: np.ndarray) -> Optional[str]:
    """
    Decode the first QR code in an RGB camera frame.

    Args:
        rgb: (H, W, 3) uint8 image.

    Returns:
        Decoded text, or None if no code could be read.

    Raises:
        ValueError: If the frame is not an HWC 3-channel image.
    """
    if rgb.ndim != 3 or rgb.shape[2] != 3:
        raise ValueError("Expected HWC image with 3 color channels.")

    gray = cv2.cvtColor(rgb.astype(np.uint8), cv2.COLOR_RGB2GRAY)
    detector = cv2.QRCodeDetector()
    text, points, _ = detector.detectAndDecode(gray)
    if points is None or not text:
        return None
    return text
