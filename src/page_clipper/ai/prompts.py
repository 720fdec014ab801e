"""Prompt construction for schema-guided extraction."""

from page_clipper.ai.hints import HintRegistry
from page_clipper.config import MAX_PROMPT_CONTENT_CHARS
from page_clipper.store.models import Property, PropertyType


def describe_property(prop: Property) -> str:
    """One bullet line: key, display name, type and constraints."""
    line = f"- {prop.key}"
    if prop.name and prop.name != prop.key:
        line += f' ("{prop.name}")'
    line += f" (Type: {prop.type})"
    if prop.type == PropertyType.DATE.value:
        line += " [Format: YYYY-MM-DD]"
    if prop.options:
        line += f" [Options: {', '.join(prop.options)}]"
    return line


def build_prompt(
    url: str,
    page_content: str,
    schema: list[Property],
    content_key: str,
    user_guidance: str = "",
    suggested_image_url: str = "",
    max_content_chars: int = MAX_PROMPT_CONTENT_CHARS,
) -> str:
    """Build the single extraction prompt sent to the model."""
    schema_description = "\n".join(describe_property(p) for p in schema) or "(no extra fields)"

    parts = [
        "I have a document collection with the following schema:",
        schema_description,
        "",
        f'REQUIRED FIELD: You MUST include a field named "{content_key}" '
        "which holds the main title of the item.",
        "",
        f"SUGGESTED IMAGE URL: {suggested_image_url or '(none found)'}",
        "(If the schema has a field of type 'image' or 'url', or a field named "
        "like 'Cover' or 'Image', populate it with this URL.)",
        "",
        "Extract information from the following webpage and map it to a single "
        "JSON object that fits this schema.",
        "",
        "USER GUIDANCE:",
        user_guidance.strip() or "(none)",
    ]

    hint = HintRegistry.detect(url)
    if hint:
        parts += ["", hint.render(url)]

    parts += [
        "",
        f"Webpage URL: {url}",
        "Webpage Content:",
        page_content[:max_content_chars],
        "",
        "Return ONLY valid JSON. The keys in the JSON must match the schema keys exactly.",
        "For select fields, pick the best matching option from the listed options.",
        "For multiSelect fields, return a JSON array of options.",
    ]
    return "\n".join(parts)
