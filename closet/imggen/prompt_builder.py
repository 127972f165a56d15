"""Prompt construction for the description and generation steps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

DESCRIPTION_CATEGORIES = ("jacket", "shirt", "pants", "skirt", "dress", "shoes", "accessory")


@dataclass(slots=True)
class DescriptionPrompt:
    """System and user text for the vision description request."""

    system: str
    user: str

    def messages(self, image_base64: str) -> list[dict[str, object]]:
        return [
            {"role": "system", "content": self.system},
            {
                "role": "user",
                "content": [
                    {"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{image_base64}"}},
                    {"type": "text", "text": self.user},
                ],
            },
        ]


class PromptBuilder:
    """Builds the vision instruction and the studio product prompt."""

    def description_prompt(self, *, max_items: int = 4, max_words: int = 6) -> DescriptionPrompt:
        categories = ", ".join(DESCRIPTION_CATEGORIES)
        system = (
            "You are a highly accurate, concise fashion analyst. When given an image, identify up to "
            f"{max_items} distinct articles of clothing and output them as a compact JSON array called "
            "clothingItems.\n\nFor each item, include:\n"
            f"  • id: integer (1–{max_items})\n"
            f"  • description: ≤{max_words}-word phrase (e.g., \"women's slim-fit navy blazer\")\n"
            f"  • category: one of [{categories}]\n"
            "  • color: primary color name\n\n"
            "Output ONLY a valid JSON array named clothingItems. Do not include any explanation, prose, "
            "or text outside the JSON. If you cannot identify any clothing, return an empty array: []."
        )
        user = "Please analyze and return ONLY the JSON array clothingItems as specified. Absolutely no explanation or prose."
        return DescriptionPrompt(system=system, user=user)

    def studio_prompt(
        self,
        description: str,
        *,
        color: str | None = None,
        extra_instructions: Iterable[str] | None = None,
    ) -> str:
        """Return the generation prompt for a single garment."""

        subject = description.strip()
        if color and color.lower() not in subject.lower():
            subject = f"{color} {subject}"
        extras = " ".join(extra_instructions or [])
        return " ".join(
            part
            for part in [
                f"Studio product photo of a {subject}.",
                "Single garment, centered, plain white background, soft even lighting, no model, no text.",
                extras,
            ]
            if part
        ).strip()
