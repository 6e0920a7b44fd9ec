"""Prompts for reading recipe pages and cookbook covers with Azure OpenAI vision."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

RECIPE_PROMPT_TEMPLATE = (
    "You read photographed cookbook pages and return structured recipe data as JSON only."
    " Use this exact JSON schema: {\n"
    "  \"success\": true,\n"
    "  \"title\": string,\n"
    "  \"ingredients\": [\n"
    "    {\"name\": string, \"quantity\": number, \"unit\": string,"
    " \"category\": one of ['meat','produce','dairy','pantry','spices','condiments','bread','other']}\n"
    "  ],\n"
    "  \"instructions\": [string],\n"
    "  \"servings\": number,\n"
    "  \"prepTime\": number of minutes,\n"
    "  \"cookTime\": number of minutes,\n"
    "  \"pageNumber\": string or null\n"
    "}.\n"
    "Copy the title exactly as printed. Quantities are numbers (1 when the page gives none);"
    " the unit is cup, tsp, tbsp, oz, lb and so on, or \"item\" when there is none."
    " Categories: meat covers beef, chicken, pork, fish and seafood; produce covers fruit, vegetables and fresh herbs;"
    " dairy covers milk, cheese, butter, cream and eggs; pantry covers flour, sugar, oil, pasta, rice and canned goods;"
    " spices covers dried herbs and seasonings; condiments covers sauces, vinegar and mustard;"
    " bread covers bread, rolls and tortillas; anything else is other."
    " Each instruction step is its own string, in order. Convert durations to minutes (\"1 hour\" = 60)."
    " Use the printed page number if visible, otherwise null.\n"
    "If the page holds no recipe (contents, introduction, index) reply"
    " {\"success\": false, \"error\": \"NOT_A_RECIPE\", \"message\": \"This page does not contain a recipe\"}.\n"
    "If the photo is too poor to read reply"
    " {\"success\": false, \"error\": \"POOR_QUALITY\", \"message\": \"Image quality is too poor to extract recipe\"}.\n"
    "Do not add commentary."
)

COVER_PROMPT_TEMPLATE = (
    "You read photographed cookbook covers and return JSON only, with this exact schema:"
    " {\"success\": true, \"name\": string, \"author\": string or null}.\n"
    "Copy the main title exactly as printed, including a prominent subtitle."
    " The author is usually near \"by\" or at the bottom of the cover; use null when no author is visible.\n"
    "If the image is not a cookbook cover reply"
    " {\"success\": false, \"error\": \"NOT_A_COOKBOOK\", \"message\": \"This does not appear to be a cookbook cover\"}.\n"
    "If the title cannot be read reply"
    " {\"success\": false, \"error\": \"NOT_READABLE\", \"message\": \"Could not read the cookbook title\"}."
)


@dataclass(frozen=True)
class VisionPromptAttempt:
    """A single request payload for the vision model."""

    messages: List[dict[str, Any]]
    force_json: bool


def _user_message(text: str, image_data_url: str) -> dict[str, Any]:
    return {
        "role": "user",
        "content": [
            {"type": "text", "text": text},
            {"type": "image_url", "image_url": {"url": image_data_url}},
        ],
    }


def build_recipe_attempts(image_data_url: str) -> List[VisionPromptAttempt]:
    """Prompt attempts for one recipe page.

    The model occasionally ignores the JSON response format, so the forced
    JSON request is followed by a relaxed one.
    """

    messages = [
        {"role": "system", "content": RECIPE_PROMPT_TEMPLATE},
        _user_message("Extract the recipe on this cookbook page.", image_data_url),
    ]
    return [
        VisionPromptAttempt(messages=messages, force_json=True),
        VisionPromptAttempt(messages=messages, force_json=False),
    ]


def build_cover_attempts(image_data_url: str) -> List[VisionPromptAttempt]:
    """Prompt attempts for a cookbook cover."""

    messages = [
        {"role": "system", "content": COVER_PROMPT_TEMPLATE},
        _user_message("Read the title and author of this cookbook cover.", image_data_url),
    ]
    return [
        VisionPromptAttempt(messages=messages, force_json=True),
        VisionPromptAttempt(messages=messages, force_json=False),
    ]
