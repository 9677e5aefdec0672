"""Username extraction helpers for the card identity cross-check."""

from __future__ import annotations

from pathlib import PurePath
import re


def username_from_origin(origin: str, pattern: re.Pattern[str]) -> str | None:
    """Return the card owner encoded in an origin file name such as `@alice.yaml`.

    Only the final path component is matched, so `cards/@alice.yaml` and
    `@alice.yaml` yield the same username.
    """

    match = pattern.match(PurePath(origin).name)
    return match.group(1) if match else None


def username_from_link(url: object, pattern: re.Pattern[str]) -> str | None:
    """Return the username embedded in a profile URL, or `None` when it does not match."""

    if not isinstance(url, str):
        return None
    match = pattern.match(url)
    return match.group(1) if match else None


def usernames_match(origin_user: str, link_user: str) -> bool:
    """Compare usernames case-insensitively."""

    return origin_user.casefold() == link_user.casefold()
