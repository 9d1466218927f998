from __future__ import annotations

from typing import Iterable

TELEGRAM_MESSAGE_LIMIT = 4096


def split_message(text: str, limit: int = TELEGRAM_MESSAGE_LIMIT) -> Iterable[str]:
    if len(text) <= limit:
        yield text
        return

    chunk = ""
    for para in text.split("\n\n"):
        candidate = para if not chunk else f"{chunk}\n\n{para}"
        if len(candidate) <= limit:
            chunk = candidate
            continue

        if chunk:
            yield chunk
            chunk = ""

        if len(para) <= limit:
            chunk = para
            continue

        for i in range(0, len(para), limit):
            yield para[i : i + limit]

    if chunk:
        yield chunk


def display_name(first_name: str | None, last_name: str | None) -> str:
    return " ".join(part for part in (first_name, last_name) if part).strip()
