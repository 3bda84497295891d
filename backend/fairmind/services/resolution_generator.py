"""
Client for the external resolution-generation model
"""

import asyncio
import json
import re
from typing import List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError, field_validator

from fairmind.core.config import settings
from fairmind.core.exceptions import GenerationFailure
from fairmind.core.logging_config import get_logger

logger = get_logger(__name__)

RESOLUTIONS_PER_BATCH = 3

JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

FIRST_ATTEMPT = {"max_new_tokens": 800, "temperature": 0.7, "top_p": 0.95, "return_full_text": False}
RETRY_ATTEMPT = {"max_new_tokens": 600, "temperature": 0.5, "return_full_text": False}


class ResolutionCandidate(BaseModel):
    """One option as produced by the model, before it is persisted"""
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    ai_score: int
    suggested_best: bool = False

    @field_validator("ai_score", mode="after")
    @classmethod
    def clamp_score(cls, value: int) -> int:
        return max(0, min(100, value))


class _ModelOutput(BaseModel):
    resolutions: List[ResolutionCandidate] = Field(
        ..., min_length=RESOLUTIONS_PER_BATCH, max_length=RESOLUTIONS_PER_BATCH
    )


def build_resolution_prompt(conversation: str) -> str:
    return f"""You are a professional mediator analyzing a dispute between two people. Based on their conversation, generate EXACTLY 3 resolution options.

Conversation:
{conversation}

Generate a JSON response with exactly this structure (no extra text, just valid JSON):
{{
  "resolutions": [
    {{
      "id": "1",
      "title": "Short title",
      "description": "Detailed description of the resolution",
      "ai_score": 85,
      "suggested_best": 1
    }},
    {{
      "id": "2",
      "title": "Short title",
      "description": "Detailed description of the resolution",
      "ai_score": 75,
      "suggested_best": 0
    }},
    {{
      "id": "3",
      "title": "Short title",
      "description": "Detailed description of the resolution",
      "ai_score": 65,
      "suggested_best": 0
    }}
  ]
}}

Guidelines:
- ai_score: confidence level 0-100
- suggested_best: 1 for the best option, 0 for others
- Make resolutions balanced, fair, and actionable
- Consider both perspectives equally

Respond with ONLY valid JSON, no additional text:"""


def normalize_recommendation(candidates: List[ResolutionCandidate]) -> List[ResolutionCandidate]:
    """Leave exactly one candidate flagged as the suggested best.

    Among the candidates the model flagged, the highest score wins; if none
    was flagged, the highest score overall does. Ties go to the earlier one.
    """
    flagged = [c for c in candidates if c.suggested_best] or candidates
    best = max(flagged, key=lambda c: c.ai_score)
    return [c.model_copy(update={"suggested_best": c is best}) for c in candidates]


def parse_resolution_candidates(generated_text: str) -> List[ResolutionCandidate]:
    """Pull the JSON object out of the model's text and validate it"""
    match = JSON_BLOCK.search(generated_text or "")
    if not match:
        raise GenerationFailure("No JSON object in model output")
    try:
        output = _ModelOutput.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as e:
        raise GenerationFailure(f"Malformed model output: {e}") from e
    return normalize_recommendation(output.resolutions)


def fallback_resolutions() -> List[ResolutionCandidate]:
    return [
        ResolutionCandidate(
            title="Compromise Solution",
            description="Both parties meet in the middle by making equal concessions to reach a balanced agreement that addresses core concerns.",
            ai_score=80,
            suggested_best=True,
        ),
        ResolutionCandidate(
            title="Time-Based Trial",
            description="Implement one approach for a defined trial period, then evaluate and adjust based on results before committing long-term.",
            ai_score=70,
            suggested_best=False,
        ),
        ResolutionCandidate(
            title="Alternative Perspective",
            description="Explore a third option that neither party initially considered, potentially solving the underlying issue differently.",
            ai_score=65,
            suggested_best=False,
        ),
    ]


class ResolutionGenerator:
    """Text-generation client with one retry and a fixed fallback batch"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        model_id: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = (api_url or settings.AI_API_URL).rstrip('/')
        self.model_id = model_id or settings.AI_MODEL_ID
        self.api_key = api_key if api_key is not None else settings.AI_API_KEY
        self.timeout = timeout or settings.AI_TIMEOUT
        self.transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/{self.model_id}"

    async def generate(self, utterances: List[str]) -> List[ResolutionCandidate]:
        """Return exactly three candidates for the conversation; never raises GenerationFailure"""
        if not self.api_key:
            logger.warning("AI_API_KEY is not configured, using fallback resolutions")
            return fallback_resolutions()

        prompt = build_resolution_prompt("\n".join(utterances))
        for attempt, parameters in enumerate((FIRST_ATTEMPT, RETRY_ATTEMPT), start=1):
            try:
                text = await self._complete(prompt, parameters)
                candidates = parse_resolution_candidates(text)
                logger.info("Generated %d resolutions on attempt %d", len(candidates), attempt)
                return candidates
            except GenerationFailure as e:
                logger.warning("Resolution generation attempt %d failed: %s", attempt, e)

        logger.error("Resolution generation failed twice, using fallback resolutions")
        return fallback_resolutions()

    async def _complete(self, prompt: str, parameters: dict) -> str:
        """One text-generation call bounded by the configured deadline"""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        body = {"inputs": prompt, "parameters": parameters}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await asyncio.wait_for(
                    client.post(self.endpoint, json=body, headers=headers),
                    timeout=self.timeout,
                )
                response.raise_for_status()
                result = response.json()
        except asyncio.TimeoutError as e:
            raise GenerationFailure(f"No response within {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise GenerationFailure(f"HTTP {e.response.status_code}: {e.response.text[:200]}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise GenerationFailure(f"Request failed: {e}") from e
        except ValueError as e:
            raise GenerationFailure(f"Response is not JSON: {e}") from e

        # Inference endpoints answer with either an object or a one-element list
        if isinstance(result, list) and result:
            result = result[0]
        if not isinstance(result, dict) or "generated_text" not in result:
            raise GenerationFailure("Response has no generated_text")
        return str(result["generated_text"])
