import json
import requests
from typing import List
from pydantic import BaseModel, Field
from mt2_draft.constants import OCR_REQUEST_TIMEOUT_SEC
from mt2_draft.errors import ConfigurationError
from mt2_draft.logger import create_logger

logger = create_logger()


class CardDetection(BaseModel):
    """Names read from the draft screen and the recognizer's overall confidence"""

    detected_cards: List[str] = []
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class OCR:
    def __init__(self, url: str, api_key: str = ""):
        if not url:
            raise ConfigurationError("OCR endpoint is not configured (settings.ocr_url)")
        self.url = url
        self.api_key = api_key

    def get_pack(
        self,
        card_names: List[str],
        screenshot: str,
        timeout: float = OCR_REQUEST_TIMEOUT_SEC,
    ) -> CardDetection:
        """
        Calls an OCR endpoint with a screenshot and a list of names,
        retrieves the OCR results for the names detected in the screenshot.

        Args:
            card_names (list of str): A list of names to search for in the screenshot.
            screenshot (base64str): The screenshot image data.

        Returns:
            CardDetection: the names detected through OCR and their confidence.
            Network or decoding failures return an empty detection.
        """
        data = {"card_names": card_names, "image": screenshot}

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-goog-api-key"] = self.api_key

        try:
            response = requests.post(
                self.url, headers=headers, data=json.dumps(data), timeout=timeout
            )
            response.raise_for_status()
            payload = json.loads(response.text)
        except (requests.RequestException, json.JSONDecodeError) as error:
            logger.error(f"OCR request failed: {error}")
            return CardDetection()

        # The pack parser returns a bare list of names without a confidence
        if isinstance(payload, list):
            return CardDetection(detected_cards=[str(n) for n in payload], confidence=1.0)

        try:
            return CardDetection(
                detected_cards=payload.get("detected_cards", []),
                confidence=payload.get("confidence", 0.0),
            )
        except (AttributeError, ValueError) as error:
            logger.error(f"Unexpected OCR payload: {error}")
            return CardDetection()
