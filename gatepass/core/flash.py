"""Transient notifications stored in the session until the next page render."""

from __future__ import annotations

from fastapi import Request

FLASH_KEY = "_flashes"


def flash(request: Request, title: str, description: str = "", variant: str = "default") -> None:
    messages = list(request.session.get(FLASH_KEY) or [])
    messages.append({"title": title, "description": description, "variant": variant})
    request.session[FLASH_KEY] = messages


def pop_flashes(request: Request) -> list[dict[str, str]]:
    return list(request.session.pop(FLASH_KEY, None) or [])
