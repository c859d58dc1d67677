# src/brt_pulse/openai_llm.py
import logging
import random
import time
from functools import partial
from typing import Callable, Dict

from openai import APIError, OpenAI, RateLimitError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

_SYSTEM = (
    "You are a Lagos Transit Intelligence Analyst. You read passenger posts about the BRT "
    "network and write brief, specific, factual analysis in plain text without markdown."
)
_SYSTEM_JSON = _SYSTEM + " Your output MUST be a single valid JSON object."

_clients: Dict[str, OpenAI] = {}


def _get_client(api_key: str) -> OpenAI:
    if not api_key:
        raise ValueError("An OpenAI API key is required; pass it in from Settings.")
    if api_key not in _clients:
        _clients[api_key] = OpenAI(api_key=api_key)
    return _clients[api_key]


def openai_llm_call(
    prompt: str,
    *,
    api_key: str,
    model: str = DEFAULT_MODEL,
    json_mode: bool = False,
    max_attempts: int = 4,
) -> str:
    """
    Calls Chat Completions and returns the message text.
    - json_mode asks for a JSON object (used by the one-shot full report).
    - Rate-limit/API errors are retried with exponential backoff + jitter;
      the last failure is re-raised.
    """
    client = _get_client(api_key)
    kwargs = {"response_format": {"type": "json_object"}} if json_mode else {}

    for attempt in range(max_attempts):
        try:
            resp = client.chat.completions.create(
                model=model,
                temperature=0.2,
                messages=[
                    {"role": "system", "content": _SYSTEM_JSON if json_mode else _SYSTEM},
                    {"role": "user", "content": prompt},
                ],
                **kwargs,
            )
            return resp.choices[0].message.content or ""
        except (RateLimitError, APIError) as e:
            if attempt == max_attempts - 1:
                raise
            delay = 1.2 * (2 ** attempt) + random.random() * 0.4
            logger.warning("OpenAI call failed (%s); retry %d in %.1fs", e.__class__.__name__, attempt + 1, delay)
            time.sleep(delay)
    raise RuntimeError("max_attempts must be at least 1")


def make_llm_call_fn(api_key: str, model: str = DEFAULT_MODEL, json_mode: bool = False) -> Callable[[str], str]:
    """Bind credential + model so report code only sees ``fn(prompt) -> str``."""
    return partial(openai_llm_call, api_key=api_key, model=model, json_mode=json_mode)
