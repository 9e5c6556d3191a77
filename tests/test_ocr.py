import pytest
import json
import requests
from unittest.mock import patch, MagicMock
from mt2_draft.errors import ConfigurationError
from mt2_draft.ocr import OCR, CardDetection

OCR_URL = "https://example.invalid/pack_parser"

# payload returned by the endpoint, expected detection
PAYLOAD_TESTS = [
    (["Moon Witch", "Smith"], CardDetection(detected_cards=["Moon Witch", "Smith"], confidence=1.0)),
    (
        {"detected_cards": ["Smith"], "confidence": 0.75},
        CardDetection(detected_cards=["Smith"], confidence=0.75),
    ),
    ({"detected_cards": []}, CardDetection()),
    ({"detected_cards": ["Smith"], "confidence": 4}, CardDetection()),
    ("unexpected", CardDetection()),
]


def mock_response(payload):
    response = MagicMock()
    response.text = json.dumps(payload)
    response.raise_for_status.return_value = None
    return response


@pytest.mark.parametrize("payload, expected", PAYLOAD_TESTS)
def test_get_pack(payload, expected):
    ocr = OCR(url=OCR_URL)

    with patch("mt2_draft.ocr.requests.post", return_value=mock_response(payload)):
        assert ocr.get_pack(["Moon Witch", "Smith"], "c2NyZWVu") == expected


def test_get_pack_request_body():
    ocr = OCR(url=OCR_URL, api_key="secret")

    with patch(
        "mt2_draft.ocr.requests.post", return_value=mock_response([])
    ) as mock_post:
        ocr.get_pack(["Smith"], "c2NyZWVu", timeout=2.0)

    args, kwargs = mock_post.call_args
    assert args == (OCR_URL,)
    assert json.loads(kwargs["data"]) == {"card_names": ["Smith"], "image": "c2NyZWVu"}
    assert kwargs["headers"]["X-goog-api-key"] == "secret"
    assert kwargs["timeout"] == 2.0


def test_get_pack_without_api_key():
    with patch(
        "mt2_draft.ocr.requests.post", return_value=mock_response([])
    ) as mock_post:
        OCR(url=OCR_URL).get_pack([], "")

    assert "X-goog-api-key" not in mock_post.call_args.kwargs["headers"]


def test_get_pack_network_error():
    with patch(
        "mt2_draft.ocr.requests.post",
        side_effect=requests.ConnectionError("offline"),
    ):
        assert OCR(url=OCR_URL).get_pack(["Smith"], "") == CardDetection()


def test_get_pack_http_error():
    response = mock_response([])
    response.raise_for_status.side_effect = requests.HTTPError("500")

    with patch("mt2_draft.ocr.requests.post", return_value=response):
        assert OCR(url=OCR_URL).get_pack(["Smith"], "") == CardDetection()


def test_get_pack_invalid_json():
    response = MagicMock()
    response.text = "<html>"

    with patch("mt2_draft.ocr.requests.post", return_value=response):
        assert OCR(url=OCR_URL).get_pack(["Smith"], "") == CardDetection()


@pytest.mark.parametrize("url", ["", None])
def test_ocr_requires_endpoint(url):
    with pytest.raises(ConfigurationError):
        OCR(url=url)
