"""
Natural-language summaries from the Gemini generateContent API.

The Advisor is built once per process and handed to whatever needs it.
Without an API key it is unavailable for its whole lifetime and every call
returns DISABLED_MESSAGE. Network or API failures are logged and turned
into a fixed message; nothing here raises into fuel or reminder handling.
"""

import json
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from .config import DEFAULT_BASE_URL, DEFAULT_MODEL, Settings
from .errors import ValidationError
from .processed_entry import ProcessedFuelEntry

DISABLED_MESSAGE = "AI features are disabled. Check your API key configuration."
FAILED_SUMMARY_MESSAGE = (
    "Sorry, the analysis could not be completed right now. "
    "Check the API configuration and try again later."
)
FAILED_ESTIMATE_MESSAGE = (
    "Sorry, the estimate could not be completed right now. "
    "Check the API configuration and try again later."
)

SUMMARY_INSTRUCTION = (
    "You are an assistant specialized in automotive data and personal finance. "
    "Analyze a user's fuel-up records for one month and give a clear, concise "
    "and useful summary in a friendly, informative tone. Format the answer with "
    "paragraphs and lists and use <strong> tags for highlights."
)
TRIP_INSTRUCTION = (
    "You are a trip-planning assistant. Calculate the fuel cost of a car trip "
    "and give useful tips. Use the fuel price per liter given in the request."
)


def month_payload(entries: List[ProcessedFuelEntry]) -> List[Dict[str, Any]]:
    """Derived per-fill-up fields sent to the model. Raw records never leave."""
    return [
        {
            "day": e.timestamp.day,
            "spend": round(e.total_value, 2),
            "avg_km_l": round(e.avg_kmpl, 1) if e.avg_kmpl is not None else None,
            "fuel": e.fuel_type.value,
        }
        for e in entries
    ]


class Advisor:
    """Generative-text capability for month summaries and trip estimates."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        trip_fuel_price: float = 5.80,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.trip_fuel_price = trip_fuel_price
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if not self.available:
            logger.warning("No Gemini API key configured; AI features are disabled")

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "Advisor":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.advisor_timeout,
            trip_fuel_price=settings.trip_fuel_price,
            session=session,
        )

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def _generate(self, system_instruction: str, prompt: str) -> str:
        """Call generateContent and return the concatenated text parts."""
        url = f"{self.base_url}/models/{self.model}:generateContent"
        body = {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        resp = self.session.post(
            url,
            json=body,
            headers={"x-goog-api-key": self.api_key},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        parts = data["candidates"][0]["content"]["parts"]
        if not all(isinstance(p, dict) for p in parts):
            raise ValueError("Malformed content parts in model response")
        text = "".join(p.get("text", "") for p in parts)
        if not text:
            raise ValueError("Empty response from model")
        return text

    def summarize_month(self, entries: List[ProcessedFuelEntry], month_label: str) -> str:
        """Summarize one month of processed fill-ups."""
        if not self.available:
            return DISABLED_MESSAGE
        if not entries:
            return f"No fuel entries recorded for {month_label}."

        prompt = (
            f"Here are the fuel-up records for {month_label}:\n\n"
            f"{json.dumps(month_payload(entries))}\n\n"
            "Based on this data, write an analysis that includes:\n"
            "1. A short overview of the month (total spend, distance driven).\n"
            "2. The day with the highest fuel spend.\n"
            "3. The best and worst consumption (km/L) recorded.\n"
            "4. One practical, personalized tip to save fuel based on the patterns observed."
        )
        try:
            return self._generate(SUMMARY_INSTRUCTION, prompt)
        except (requests.RequestException, KeyError, IndexError, TypeError, ValueError) as e:
            logger.error("Gemini month summary failed: {}", e)
            return FAILED_SUMMARY_MESSAGE

    def estimate_trip(self, distance_km: float, avg_kmpl: float) -> str:
        """Estimate fuel cost for a trip at the given consumption."""
        if distance_km is None or distance_km <= 0:
            raise ValidationError(f"Trip distance must be positive, got {distance_km!r}")
        if avg_kmpl is None or avg_kmpl <= 0:
            raise ValidationError(f"Average consumption must be positive, got {avg_kmpl!r}")
        if not self.available:
            return DISABLED_MESSAGE

        prompt = (
            f"I need to estimate the cost of a {distance_km:g} km trip. "
            f"My car averages {avg_kmpl:.1f} km/L. Using a fuel price of "
            f"{self.trip_fuel_price:.2f} per liter, calculate the total trip cost. "
            "Show the assumed fuel price, the liters needed and the final cost clearly. "
            "Add 2 tips for more economical driving on the trip. "
            "Use <strong> tags for highlights."
        )
        try:
            return self._generate(TRIP_INSTRUCTION, prompt)
        except (requests.RequestException, KeyError, IndexError, TypeError, ValueError) as e:
            logger.error("Gemini trip estimate failed: {}", e)
            return FAILED_ESTIMATE_MESSAGE
