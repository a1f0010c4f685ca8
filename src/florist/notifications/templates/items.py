"""Short item summaries for push payloads."""

import json
from dataclasses import dataclass

ELLIPSIS = "…"


@dataclass(frozen=True)
class ItemSummary:
    names: list[str]
    more: int

    def as_text(self) -> str:
        text = ", ".join(self.names)
        if self.more:
            text = f"{text} +{self.more} more"
        return text


def shorten(name: str, max_length: int) -> str:
    return name if len(name) <= max_length else name[:max_length] + ELLIPSIS


def summarize_items(names, max_items: int, max_length: int) -> ItemSummary:
    """Keep the first ``max_items`` non-empty names, each at most ``max_length`` characters."""
    if isinstance(names, str):
        names = json.loads(names) if names else []
    cleaned = [shorten(name.strip(), max_length) for name in names or [] if name and name.strip()]
    shown = cleaned[:max_items]
    return ItemSummary(names=shown, more=len(cleaned) - len(shown))
