import cv2
import numpy as np
import pytest

from campus_nav.router.map_loader import load_campus_map
from campus_nav.router.qr_resolver import decode_qr_frame, is_valid_qr_payload, process_qr_code


@pytest.fixture(scope="module")
def campus():
    return load_campus_map()


def test_known_code_resolves_to_node(campus):
    node = process_qr_code("CAMPUS_LIBRARY", campus)
    assert node is not None
    assert node.id == "library"
    assert node.name == "Central Library"


@pytest.mark.parametrize("payload", [
    "",
    None,
    "LIBRARY",
    "https://example.com/CAMPUS_LIBRARY",
    "campus_library",
    "CAMPUS_NOT_A_PLACE",
])
def test_rejected_payloads(campus, payload):
    assert process_qr_code(payload, campus) is None


def test_custom_prefix(campus):
    assert not is_valid_qr_payload("CAMPUS_LIBRARY", prefix="UNI_")
    assert process_qr_code("CAMPUS_LIBRARY", campus, prefix="UNI_") is None
    assert is_valid_qr_payload("UNI_X", prefix="UNI_")


def test_blank_frame_decodes_to_none():
    frame = np.full((240, 320, 3), 255, dtype=np.uint8)
    assert decode_qr_frame(frame) is None


def test_frame_shape_is_validated():
    with pytest.raises(ValueError):
        decode_qr_frame(np.zeros((240, 320), dtype=np.uint8))
    with pytest.raises(ValueError):
        decode_qr_frame(np.zeros((240, 320, 4), dtype=np.uint8))


def test_encoded_marker_decodes_and_resolves(campus):
    encoder = cv2.QRCodeEncoder.create()
    code = encoder.encode("CAMPUS_LIBRARY")
    code = cv2.resize(code, None, fx=8, fy=8, interpolation=cv2.INTER_NEAREST)
    code = cv2.copyMakeBorder(code, 40, 40, 40, 40, cv2.BORDER_CONSTANT, value=255)
    frame = cv2.cvtColor(code, cv2.COLOR_GRAY2RGB)

    text = decode_qr_frame(frame)
    assert text == "CAMPUS_LIBRARY"
    assert process_qr_code(text, campus).id == "library"
