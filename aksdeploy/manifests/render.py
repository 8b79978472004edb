"""Deployment manifest templating."""
import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def substitute(text: str, placeholder: str, value: str) -> str:
    """Replace every occurrence of ``placeholder`` with ``value``. No YAML parsing."""
    if not placeholder:
        raise ValueError("placeholder must not be empty")
    return text.replace(placeholder, value)


def render_manifest(
    base_path: Union[str, Path],
    output_path: Union[str, Path],
    placeholder: str,
    value: str,
) -> Path:
    """Write a copy of ``base_path`` with the placeholder substituted.

    Args:
        base_path: Manifest containing the literal placeholder token.
        output_path: Where the rendered manifest is written.
        placeholder: Token to replace, e.g. ``ACR_NAME``.
        value: Replacement text, e.g. the registry name.

    Returns:
        Path: The rendered manifest.

    Raises:
        FileNotFoundError: If the base manifest doesn't exist.
    """
    base = Path(base_path)
    output = Path(output_path)
    content = base.read_text()
    count = content.count(placeholder)
    output.write_text(substitute(content, placeholder, value))
    logger.debug("Rendered %s -> %s (%d replacements)", base, output, count)
    return output
