"""User prompt construction for recipe recommendation requests."""

from __future__ import annotations

BASE_INSTRUCTION = (
    "이 이미지에 있는 식재료들을 분석하고, "
    "만들 수 있는 요리 레시피 2~3개를 추천해주세요."
)
MODIFIER_SEPARATOR = "\n\n추가 요청사항: "


def build_user_prompt(modifier: str | None = None) -> str:
    """Return the base instruction, followed by the user's extra request if any."""

    if not modifier:
        return BASE_INSTRUCTION
    return f"{BASE_INSTRUCTION}{MODIFIER_SEPARATOR}{modifier}"
