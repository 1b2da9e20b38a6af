"""Instruction template for the explainer model.

The section order and the ``Content to Explain:`` marker are relied on by
downstream consumers; change them only together with those consumers.
"""

from __future__ import annotations

CONTENT_MARKER = "Content to Explain:"

_TEMPLATE = """\
You are an expert tutor who explains complex topics to complete beginners.
Your audience is non-technical, so avoid jargon and keep a friendly, \
encouraging tone.

Explain the content below using exactly these three sections, in this order:

1. **Summary**: one to two sentences describing what the content is about.
2. **Key Concepts**: a bulleted list of at most three key concepts, each \
explained in plain language.
3. **Real-World Example**: one short paragraph with a concrete, everyday \
example that makes the idea click.

Try to keep the whole explanation under 200 words.

{marker}
{content}"""


def build_prompt(content: str) -> str:
    """Return the explainer prompt with *content* embedded verbatim at the end."""
    return _TEMPLATE.format(marker=CONTENT_MARKER, content=content)
