"""Value formatting utilities."""

from typing import Optional

ABBREVIATION_MARKER = "..."


def normalize_value(value: Optional[str]) -> Optional[str]:
    """Trim a value, mapping None and blank strings to None.

    Args:
        value: Raw value

    Returns:
        Trimmed value or None
    """
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def abbreviate(value: Optional[str], max_width: int) -> Optional[str]:
    """Abbreviate a value to at most max_width characters.

    Values longer than max_width are cut and end with "...", so the result
    is exactly max_width characters long.

    Args:
        value: Value to abbreviate
        max_width: Maximum length including the marker

    Returns:
        Abbreviated value, or the value unchanged if it already fits
    """
    if max_width < len(ABBREVIATION_MARKER) + 1:
        raise ValueError(f"Minimum abbreviation width is {len(ABBREVIATION_MARKER) + 1}")
    if value is None or len(value) <= max_width:
        return value
    return value[:max_width - len(ABBREVIATION_MARKER)] + ABBREVIATION_MARKER


def format_deep_link(base_url: str, shared_space_id: str, workspace_id: str, work_item_id: str) -> str:
    """Format the Octane UI link for a work item."""
    return (
        f"{base_url.rstrip('/')}/ui/entity-navigation"
        f"?p={shared_space_id}/{workspace_id}&entityType=work_item&id={work_item_id}"
    )
