from __future__ import annotations

import re
from typing import Any, List, Sequence


def collapse_spaces(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    if limit <= 3:
        return text[:limit]

    window = text[:limit]
    cut = window.rfind(" ")
    if cut >= int(limit * 0.7):
        return window[:cut].strip()

    return (window[: limit - 3].rstrip() + "...").strip()


def attachment_urls(message: Any) -> List[str]:
    urls: List[str] = []
    for attachment in getattr(message, "attachments", None) or ():
        url = str(getattr(attachment, "url", "") or "").strip()
        if url:
            urls.append(url)
    return urls


def format_snipe(
    author_id: int,
    channel_id: int,
    content: str,
    attachments: Sequence[str],
    limit: int = 1900,
) -> str:
    lines = [f"Last deleted message from <@{author_id}> in <#{channel_id}>:"]
    body = content.strip()
    if body:
        lines.append(body)
    if attachments:
        lines.append("Attachments:")
        lines.extend(attachments)
    if len(lines) == 1:
        lines.append("*(no text content)*")
    return truncate("\n".join(lines), limit)
