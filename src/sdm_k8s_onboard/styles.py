"""Custom styling for questionary prompts.

This module provides a consistent style for the confirmation and
context selection prompts.
"""

from questionary import Style

# ANSI 256 colors for broad terminal compatibility
PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#ffaf00 bold"),  # Amber question mark, every prompt guards a change
        ("question", "bold"),
        ("answer", "fg:#87d787 bold"),  # Green submitted answer
        ("pointer", "fg:#ffaf00 bold"),
        ("highlighted", "fg:#1c1c1c bg:#ffaf00 bold"),
        ("selected", "fg:#87d787"),
        ("separator", "fg:#6c6c6c"),
        ("instruction", "fg:#6c6c6c italic"),
        ("text", ""),
        ("disabled", "fg:#585858 italic"),
    ]
)

# Icon prefixes for prompts
POINTER = "❯ "
QMARK = "? "
