"""
Ordered pattern cascades.

A cascade is a list of rules tried in order against the whole transcript;
the first rule whose pattern matches decides the field value, later rules
are never consulted. Label-anchored rules go first, generic fallbacks last.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Rule:
    pattern: re.Pattern
    extract: Callable[[re.Match], Any]

    @classmethod
    def group(cls, regex: str, flags: int = re.IGNORECASE, convert: Callable[[str], Any] = str.strip) -> "Rule":
        """Rule that returns the first capturing group (or the whole match) passed through `convert`."""
        return cls(re.compile(regex, flags), lambda m: convert((m.group(1) if m.re.groups else None) or m.group(0)))


def first_match(text: str, rules: Sequence[Rule], default: T) -> T:
    """
    Run a cascade and return the value of the first matching rule.

    Args:
        text: Full transcript.
        rules: Rules, most specific first.
        default: Value used when no rule matches.
    """
    for rule in rules:
        match = rule.pattern.search(text)
        if match:
            return rule.extract(match)
    return default


def find_all(text: str, pattern: re.Pattern, convert: Optional[Callable[[str], str]] = None) -> list:
    """All non-overlapping first-group captures of `pattern`, in order of appearance."""
    values = [m.group(1) for m in pattern.finditer(text)]
    return [convert(v) for v in values] if convert else values
