import re

MAX_DESCRIPTION_CHARS = 300


def clean_field(value: str) -> str:
    """Collapse line breaks and runs of spaces, trim separators at both ends."""
    value = re.sub(r"[\r\n]+", " ", value or "")
    value = re.sub(r"\s{2,}", " ", value)
    value = re.sub(r"^[:\s-]+", "", value)
    value = re.sub(r"[:\s-]+$", "", value)
    return value.strip()


def clean_description(value: str) -> str:
    value = re.sub(r"[\r\n]+", " ", value or "")
    value = re.sub(r"\s{2,}", " ", value)
    value = re.sub(r"^[:\s-]+", "", value)
    return value.strip()[:MAX_DESCRIPTION_CHARS]


def split_block(block: str) -> tuple[str, str]:
    """
    Split a captured party block into (name, address).

    The first non-empty line is the name; the remaining non-empty lines are
    joined with ", " to form the address.
    """
    lines = [line.strip() for line in (block or "").splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        return "", ""
    return clean_field(lines[0]), ", ".join(lines[1:])
