from __future__ import annotations

import threading
from typing import Callable, Sequence

from .dedupe import SeenKeys, context_key
from .errors import OperationCancelled
from .http_client import XhsHttpClient
from .links import extract_links, is_short_link, normalize_link
from .media import ExtractedLink, LinkContext, RemoteMedia
from .normalize import TokenFactory, build_remote_media
from .post_id import extract_post_id
from .walker import parse_post_details

NotifyFn = Callable[[str], None]


def _noop_notify(message: str) -> None:
    return None


class MediaCollector:
    """
    Resolve share text into an ordered, deduplicated list of downloadable media.

    Links are processed one at a time. Failures of a single link are reported
    through notify and never stop the remaining links; only cancellation aborts.
    """

    def __init__(
        self,
        client: XhsHttpClient,
        *,
        notify: NotifyFn | None = None,
        cancel_event: threading.Event | None = None,
        token_factory: TokenFactory | None = None,
    ) -> None:
        self._client = client
        self._notify = notify or _noop_notify
        self._cancel_event = cancel_event
        self._token_factory = token_factory

    def _check_cancelled(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise OperationCancelled("Media collection was cancelled")

    def prepare_context(self, link: ExtractedLink) -> LinkContext | None:
        source = normalize_link(link.text)
        if not source:
            return None

        resolved = source
        if is_short_link(source):
            redirect = self._client.resolve_short_link(source)
            if redirect:
                resolved = redirect
                self._notify(f"short link resolved to {redirect}")
            else:
                self._notify("short link could not be resolved, using original link")

        return LinkContext(
            source_url=source,
            resolved_url=resolved,
            post_id=extract_post_id(resolved),
        )

    def prepare_contexts(self, links: Sequence[ExtractedLink]) -> list[LinkContext]:
        contexts: list[LinkContext] = []
        seen = SeenKeys()
        for link in links:
            self._check_cancelled()
            context = self.prepare_context(link)
            if context is None:
                continue
            if not seen.insert(context_key(context)):
                continue
            contexts.append(context)
        return contexts

    def collect(self, text: str) -> list[RemoteMedia]:
        links = extract_links(text)
        if not links:
            self._notify("no Xiaohongshu links found in input")
            return []

        contexts = self.prepare_contexts(links)
        if not contexts:
            self._notify("no links to process")
            return []

        aggregated: list[RemoteMedia] = []
        seen = SeenKeys()

        for context in contexts:
            self._check_cancelled()
            self._notify(f"fetching post {context.resolved_url}")

            html = self._client.fetch_page(context.resolved_url)
            if html is None:
                self._notify(f"failed to load post {context.resolved_url}")
                continue

            urls = parse_post_details(html)
            if not urls:
                self._notify(f"post {context.label} has no downloadable media")
                continue

            media = build_remote_media(
                urls, context.post_id, token_factory=self._token_factory
            )
            new_items = seen.filter_new_media(media)
            self._notify(f"post {context.label} resolved {len(new_items)} media")
            aggregated.extend(new_items)

        return aggregated


def collect_media(
    text: str,
    *,
    client: XhsHttpClient | None = None,
    notify: NotifyFn | None = None,
    cancel_event: threading.Event | None = None,
) -> list[RemoteMedia]:
    if client is not None:
        return MediaCollector(client, notify=notify, cancel_event=cancel_event).collect(text)

    with XhsHttpClient() as owned:
        return MediaCollector(owned, notify=notify, cancel_event=cancel_event).collect(text)
