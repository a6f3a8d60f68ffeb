"""
Prompt templates for the UniAsset AI gateway.
Templates are plain text files next to this module with ``{placeholder}`` fields.
"""

import os
from typing import Dict

PROMPT_DIR = os.path.dirname(os.path.abspath(__file__))

_templates: Dict[str, str] = {}


def load_prompt(filename: str) -> str:
    """
    Read a prompt template, caching it after the first read.

    Args:
        filename: Template file name, e.g. 'parse_asset.txt'

    Raises:
        FileNotFoundError: if no such template ships with the package
    """
    template = _templates.get(filename)
    if template is None:
        path = os.path.join(PROMPT_DIR, filename)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Prompt template not found: {path}")
        with open(path, encoding="utf-8") as f:
            template = f.read().strip()
        _templates[filename] = template
    return template


def render_prompt(filename: str, **values) -> str:
    """Fill a template's placeholders; substituted values are not re-parsed."""
    return load_prompt(filename).format(**values)


def clear_prompt_cache():
    """Forget cached templates so edited files are picked up."""
    _templates.clear()


ADVISOR_SYSTEM_PROMPT = load_prompt("advisor_system.txt")
EXTRACTION_SYSTEM_PROMPT = load_prompt("extraction_system.txt")
