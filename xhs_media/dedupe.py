from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .media import LinkContext, RemoteMedia


def context_key(context: LinkContext) -> str:
    if context.post_id:
        return f"id:{context.post_id}"
    return f"url:{context.resolved_url}"


@dataclass
class SeenKeys:
    keys: set[str] = field(default_factory=set)

    def insert(self, key: str) -> bool:
        """Add key; True when it was not seen before."""
        if key in self.keys:
            return False
        self.keys.add(key)
        return True

    def filter_new_media(self, media: Iterable[RemoteMedia]) -> list[RemoteMedia]:
        """Keep media whose original URL is new, recording each as seen."""
        return [item for item in media if self.insert(item.original_url)]
