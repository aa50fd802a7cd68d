from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Literal

LinkKind = Literal["short", "discovery_item", "explore", "user_profile"]
MediaType = Literal["image", "video"]


@dataclass(frozen=True)
class ExtractedLink:
    """A substring of user input that matched one of the share-link patterns."""

    text: str
    kind: LinkKind


@dataclass(frozen=True)
class LinkContext:
    source_url: str
    resolved_url: str
    post_id: str | None = None

    @property
    def label(self) -> str:
        if self.post_id:
            return self.post_id
        tail = self.resolved_url.rstrip("/").rsplit("/", 1)[-1]
        return tail.split("?", 1)[0] or self.resolved_url


@dataclass(frozen=True)
class RemoteMedia:
    """A normalized, directly downloadable media resource."""

    url: str
    type: MediaType
    file_base_name: str
    original_url: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def is_video(self) -> bool:
        return self.type == "video"
