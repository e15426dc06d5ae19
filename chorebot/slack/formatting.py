"""Slack text helpers: mention parsing and mrkdwn blocks."""

import re

_MENTION_RE = re.compile(r"<@([A-Z0-9]+)(?:\|[^>]*)?>")

# Slack rejects section text longer than this
_SECTION_LIMIT = 3000


def parse_slack_text(text: str) -> tuple[str, list[str]]:
    """Split raw Slack text into (text without user mentions, mentioned user IDs)."""
    mentions = _MENTION_RE.findall(text or "")
    clean = _MENTION_RE.sub("", text or "")
    return " ".join(clean.split()), mentions


def build_blocks(text: str) -> list[dict]:
    """Wrap text in mrkdwn section blocks, splitting on paragraph breaks when too long."""
    chunks: list[str] = []
    current = ""
    for para in text.split("\n\n"):
        candidate = f"{current}\n\n{para}" if current else para
        if len(candidate) <= _SECTION_LIMIT:
            current = candidate
            continue
        if current:
            chunks.append(current)
        while len(para) > _SECTION_LIMIT:
            chunks.append(para[:_SECTION_LIMIT])
            para = para[_SECTION_LIMIT:]
        current = para
    if current:
        chunks.append(current)

    return [
        {"type": "section", "text": {"type": "mrkdwn", "text": chunk}}
        for chunk in chunks
    ]
