"""Prompt builder that turns client prompt text into upstream instructions."""

from __future__ import annotations

import logging

from prompts.templates import TEMPLATES

logger = logging.getLogger(__name__)


def build_style_advice_prompt(style: str, template_name: str = "style_advice") -> str:
    """Wrap a glasses style name (e.g. "aviator") in the stylist instruction."""
    template = TEMPLATES[template_name]
    prompt = template.safe_substitute(style=style.strip())
    logger.debug("Built style advice prompt for style=%s", style)
    return prompt
