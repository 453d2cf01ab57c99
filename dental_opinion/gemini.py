import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from dental_opinion.config import DEFAULT_API_BASE, DEFAULT_MODEL, DEFAULT_TEMPERATURE, Settings
from dental_opinion.errors import ConfigurationError, ProviderError, ResponseParseError
from dental_opinion.schemas import AnalysisRequest, AnalysisResult

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to get analysis from Gemini API."

SYSTEM_INSTRUCTION = (
    "You are a world-class, board-certified dentist providing a helpful second opinion "
    "based on a dental scan. Analyze the image provided and the patient's concern. "
    "Provide clear, concise, and easy-to-understand information. Always include a "
    "disclaimer that this is not a substitute for a formal diagnosis from their in-person "
    "dentist. Structure your response in the requested JSON format."
)

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "observation": {
            "type": "STRING",
            "description": "A general observation of the dental scan provided.",
        },
        "potential_issues": {
            "type": "ARRAY",
            "items": {
                "type": "STRING",
                "description": "A potential issue identified, such as a possible cavity, "
                               "gum inflammation, or plaque buildup.",
            },
            "description": "A list of potential dental issues identified in the scan. "
                           "Keep each issue concise.",
        },
        "recommendations": {
            "type": "ARRAY",
            "items": {
                "type": "STRING",
                "description": "A recommended action for the patient, like 'Consult your dentist "
                               "about the shadow on tooth #14' or 'Improve flossing technique "
                               "around the lower molars'.",
            },
            "description": "A list of actionable recommendations for the patient.",
        },
        "disclaimer": {
            "type": "STRING",
            "description": "A mandatory disclaimer stating this is an AI-generated second opinion "
                           "and not a substitute for a professional in-person dental "
                           "consultation and diagnosis.",
        },
    },
    "required": ["observation", "potential_issues", "recommendations", "disclaimer"],
}


def concern_prompt(concern: str) -> str:
    return f'Patient\'s primary concern: "{concern}". Please analyze the attached dental scan.'


class Analyzer(ABC):
    """
    Contract for anything that turns a scan and a concern into an AnalysisResult.
    Implementations raise AnalysisError subclasses on failure.
    """

    @abstractmethod
    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        raise NotImplementedError


class GeminiAnalyzer(Analyzer):
    """
    Gemini generateContent over REST.

    One request per call: no retries and no timeout override, the transport
    defaults apply.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        api_base: str = DEFAULT_API_BASE,
        temperature: float = DEFAULT_TEMPERATURE,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.temperature = temperature
        self._http = session or requests

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "GeminiAnalyzer":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            api_base=settings.gemini_api_base,
            temperature=settings.temperature,
            session=session,
        )

    @property
    def url(self) -> str:
        return f"{self.api_base}/v1beta/models/{self.model}:generateContent"

    def build_payload(self, request: AnalysisRequest) -> Dict[str, Any]:
        img_base64 = base64.b64encode(request.image).decode("utf-8")
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {
                            "inline_data": {
                                "mime_type": request.mime_type,
                                "data": img_base64,
                            }
                        },
                        {"text": concern_prompt(request.concern)},
                    ],
                }
            ],
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
                "temperature": self.temperature,
            },
        }

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured.")

        payload = self.build_payload(request)
        params = {"key": self.api_key}
        headers = {"Content-Type": "application/json"}

        try:
            response = self._http.post(self.url, params=params, json=payload, headers=headers)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("Error calling Gemini API (model=%s): %s", self.model, e)
            raise ProviderError(GENERIC_FAILURE) from e

        try:
            body = response.json()
        except ValueError as e:
            logger.error("Gemini API returned a non-JSON body: %s", e)
            raise ResponseParseError(GENERIC_FAILURE) from e

        return parse_result(body)


def parse_result(body: Dict[str, Any]) -> AnalysisResult:
    """Pull the candidate text out of a generateContent reply and decode it strictly."""
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        logger.error("Gemini reply has no candidate text: %r", e)
        raise ResponseParseError(GENERIC_FAILURE) from e

    if not isinstance(text, str):
        logger.error("Gemini candidate text is %s, not a string", type(text).__name__)
        raise ResponseParseError(GENERIC_FAILURE)

    try:
        return AnalysisResult.model_validate_json(text.strip())
    except ValidationError as e:
        logger.error("Gemini reply does not match the result schema: %s", e)
        raise ResponseParseError(GENERIC_FAILURE) from e
