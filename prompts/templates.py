"""Prompt templates sent to the upstream models."""

from __future__ import annotations

from string import Template

# --- Style advice (text output) ---

STYLE_ADVICE = Template(
    "You are a professional eyewear stylist. Look at the face in this photo "
    "and give friendly, specific advice on how $style glasses would suit this person. "
    "Comment on face shape, proportions and colouring, suggest frame colours and "
    "sizes that would work best, and mention one alternative style worth trying. "
    "Keep the answer under 150 words."
)

# Map of named templates
TEMPLATES: dict[str, Template] = {
    "style_advice": STYLE_ADVICE,
}
