"""
Formatters utility.

Text helpers for messages sent with Telegram's legacy Markdown parse mode.
"""

from typing import Any


MARKDOWN_SPECIAL_CHARS = ("_", "*", "`", "[")


def escape_md(value: Any) -> str:
    """
    Escape a value for Markdown V1.

    Escapes: _ * ` [

    Args:
        value: Any value; None renders as an empty string

    Returns:
        Text that Telegram shows literally
    """
    if value is None:
        return ""
    text = str(value)
    for char in MARKDOWN_SPECIAL_CHARS:
        text = text.replace(char, f"\\{char}")
    return text
