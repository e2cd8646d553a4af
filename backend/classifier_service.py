# classifier_service.py
import logging
import os

import httpx
from dotenv import load_dotenv

from errors import ClassificationFormatError, ClassificationUnavailable
from score_resolver import default_resolution, parse_raw_classification, resolve
from sentiment_service import analyze_sentiment

# Load local .env (on Render, env vars are injected automatically)
load_dotenv()

logger = logging.getLogger(__name__)

# --- Hugging Face inference config ---
HF_API_KEY = os.getenv("HF_API_KEY")
HF_MODEL = os.getenv("HF_MODEL", "j-hartmann/emotion-english-distilroberta-base")
HF_API_URL = os.getenv("HF_API_URL", "https://api-inference.huggingface.co/models")
CLASSIFIER_TIMEOUT = float(os.getenv("CLASSIFIER_TIMEOUT", "30"))

# "huggingface" needs a key; without one we classify locally with VADER
CLASSIFIER_BACKEND = os.getenv("CLASSIFIER_BACKEND") or ("huggingface" if HF_API_KEY else "vader")

FALLBACK_WARNING = "Mood analysis is unavailable right now; saved as neutral."


def _post_inference(text: str, client: httpx.Client):
    headers = {
        "Authorization": f"Bearer {HF_API_KEY}",
        "Content-Type": "application/json",
    }
    try:
        resp = client.post(f"{HF_API_URL}/{HF_MODEL}", headers=headers, json={"inputs": text})
    except httpx.HTTPError as e:
        raise ClassificationUnavailable(f"classifier request failed: {e}") from e

    logger.info("classifier status: %s", resp.status_code)
    logger.debug("classifier resp: %s", resp.text[:800])
    if resp.is_error:
        raise ClassificationUnavailable(
            f"classifier returned {resp.status_code}", status_code=resp.status_code
        )
    try:
        return resp.json()
    except ValueError as e:
        raise ClassificationFormatError("classifier body is not JSON") from e


def classify_text(text: str, client: httpx.Client = None, backend: str = None):
    """Call the configured classifier and return its raw label/score list."""
    backend = backend or CLASSIFIER_BACKEND
    if backend == "vader":
        return analyze_sentiment(text)
    if backend != "huggingface":
        raise ValueError(f"unknown classifier backend {backend!r}")

    if client is not None:
        payload = _post_inference(text, client)
    else:
        with httpx.Client(timeout=CLASSIFIER_TIMEOUT) as c:
            payload = _post_inference(text, c)
    return parse_raw_classification(payload)


def analyze_mood(text: str, client: httpx.Client = None, backend: str = None):
    """
    Classify one journal text.
      - empty/whitespace text never reaches the classifier
      - classifier outages and malformed answers degrade to neutral
    Returns (Resolution, warning-or-None).
    """
    if not (text or "").strip():
        return default_resolution(), None

    try:
        raw = classify_text(text.strip(), client=client, backend=backend)
        return resolve(raw), None
    except ClassificationUnavailable as e:
        logger.warning("classifier unavailable, using neutral: %s", e)
    except ClassificationFormatError as e:
        logger.warning("unexpected classifier response, using neutral: %s", e)

    # Fallback if anything goes wrong
    return default_resolution(), FALLBACK_WARNING
