"""Azure OpenAI vision adapter implementing RecipeExtractionClient."""
from __future__ import annotations

import json
import logging
from typing import Iterable, Optional, Tuple

from azure.identity import DefaultAzureCredential, get_bearer_token_provider
from openai import APIError, AsyncAzureOpenAI

from cookscan.application.scanning.ports import CookbookNameOutcome, ExtractionOutcome
from cookscan.config import Settings, get_settings
from cookscan.domain.value_objects.captured_image import CapturedImage
from cookscan.infrastructure.images.image_processor import image_to_data_url

from .recipe_prompt_builder import VisionPromptAttempt, build_cover_attempts, build_recipe_attempts
from .recipe_response_parser import PARSE_ERROR, RecipeResponseParser

logger = logging.getLogger(__name__)

API_ERROR = "API_ERROR"
EMPTY_RESPONSE = "EMPTY_RESPONSE"

COVER_MAX_TOKENS = 1024


class AzureRecipeExtractionClient:
    """Reads recipe pages and cookbook covers through Azure OpenAI vision."""

    def __init__(
        self,
        *,
        client: Optional[AsyncAzureOpenAI] = None,
        parser: Optional[RecipeResponseParser] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        endpoint = settings.ensure_endpoint()
        model = settings.vision_deployment

        if client is not None:
            self._client = client
        else:
            if not endpoint:
                raise RuntimeError("AZURE_OPENAI_ENDPOINT must be configured before using the vision client")
            api_key = settings.azure_openai_api_key
            if api_key:
                self._client = AsyncAzureOpenAI(
                    api_key=api_key,
                    api_version=settings.azure_openai_api_version,
                    azure_endpoint=endpoint,
                )
            else:
                token_provider = get_bearer_token_provider(
                    DefaultAzureCredential(),
                    "https://cognitiveservices.azure.com/.default",
                )
                self._client = AsyncAzureOpenAI(
                    api_version=settings.azure_openai_api_version,
                    azure_endpoint=endpoint,
                    azure_ad_token_provider=token_provider,
                )

        if not model:
            raise RuntimeError("AZURE_OPENAI_VISION_MODEL or AZURE_OPENAI_DEPLOYMENT_NAME must be configured")

        self._model = model
        self._max_tokens = settings.extraction_max_tokens
        self._parser = parser or RecipeResponseParser()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def extract(self, image: CapturedImage) -> ExtractionOutcome:
        """Extract a recipe from one page photo."""

        attempts = build_recipe_attempts(image_to_data_url(image))
        try:
            payload, content_seen = await self._run_attempts(attempts, self._max_tokens)
        except APIError as exc:
            logger.warning("Vision request failed: %s", exc)
            return ExtractionOutcome.failed(API_ERROR, f"AI extraction failed: {exc}")

        if payload is None:
            if not content_seen:
                return ExtractionOutcome.failed(EMPTY_RESPONSE, "AI returned empty response")
            return ExtractionOutcome.failed(PARSE_ERROR, "AI response was not valid JSON")
        return self._parser.parse_recipe(payload)

    async def extract_cookbook_name(self, image: CapturedImage) -> CookbookNameOutcome:
        """Read the title and author from a cover photo."""

        attempts = build_cover_attempts(image_to_data_url(image))
        try:
            payload, content_seen = await self._run_attempts(attempts, COVER_MAX_TOKENS)
        except APIError as exc:
            logger.warning("Cover request failed: %s", exc)
            return CookbookNameOutcome.failed(API_ERROR, f"AI extraction failed: {exc}")

        if payload is None:
            if not content_seen:
                return CookbookNameOutcome.failed(EMPTY_RESPONSE, "AI returned empty response")
            return CookbookNameOutcome.failed(PARSE_ERROR, "AI response was not valid JSON")
        return self._parser.parse_cover(payload)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _run_attempts(
        self,
        attempts: Iterable[VisionPromptAttempt],
        max_tokens: int,
    ) -> Tuple[Optional[dict], bool]:
        content_seen = False
        for attempt in attempts:
            content = await self._invoke_model(attempt, max_tokens)
            if not content:
                continue
            content_seen = True
            payload = self._extract_json_payload(content)
            if payload is not None:
                return payload, True
            logger.debug(
                "Vision attempt yielded invalid JSON (force_json=%s): %.200s",
                attempt.force_json,
                content,
            )

        if content_seen:
            logger.warning("Failed to parse vision payload after retries")
        return None, content_seen

    async def _invoke_model(self, attempt: VisionPromptAttempt, max_tokens: int) -> Optional[str]:
        kwargs = {
            "model": self._model,
            "messages": attempt.messages,
            "max_completion_tokens": max_tokens,
        }
        if attempt.force_json:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self._client.chat.completions.create(**kwargs)
        content = response.choices[0].message.content if response.choices else None
        return content or None

    @staticmethod
    def _extract_json_payload(content: str) -> Optional[dict]:
        text = content.strip()
        if not text:
            return None

        try:
            parsed = json.loads(text)
            return parsed if isinstance(parsed, dict) else None
        except json.JSONDecodeError:
            pass

        # Fenced code block, with or without a language tag
        if text.startswith("```") and text.endswith("```"):
            body = "\n".join(text.splitlines()[1:-1]).strip()
            if body:
                try:
                    parsed = json.loads(body)
                    return parsed if isinstance(parsed, dict) else None
                except json.JSONDecodeError:
                    pass

        # First JSON object embedded in prose
        start_index = text.find("{")
        end_index = text.rfind("}")
        if start_index != -1 and end_index > start_index:
            try:
                parsed = json.loads(text[start_index : end_index + 1])
            except json.JSONDecodeError:
                return None
            return parsed if isinstance(parsed, dict) else None

        return None
