"""Rich console utilities for styled, timestamped log output.

The sync loop runs unattended for days, so every line goes through
``Console.log`` and carries the time it was written.
"""

from rich.console import Console
from rich.theme import Theme

# Custom theme with consistent colors
_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "cyan bold",
        "muted": "dim",
    }
)

# Shared console instance
console = Console(theme=_THEME, log_path=False)


def info(message: str) -> None:
    """Log an informational message.

    Args:
        message: The message to display.

    """
    console.log(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Log a success message.

    Args:
        message: The message to display.

    """
    console.log(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Log a warning message.

    Args:
        message: The message to display.

    """
    console.log(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Log an error message.

    Args:
        message: The message to display.

    """
    console.log(f"[error]✗[/error] {message}")


def action(message: str) -> None:
    """Log an action/progress message.

    Args:
        message: The message to display.

    """
    console.log(f"[info]→[/info] {message}")


def step(message: str) -> None:
    """Log a sub-step message."""
    console.log(f"[muted]•[/muted] {message}")


def highlight(text: str) -> str:
    """Return text wrapped in highlight markup.

    Args:
        text: The text to highlight.

    Returns:
        Text wrapped in Rich markup for highlighting.

    """
    return f"[highlight]{text}[/highlight]"
