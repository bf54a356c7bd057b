# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared helpers for tests that need HTML pages or a fake site."""

from __future__ import annotations

from collections.abc import Mapping

import httpx

HTML = "text/html; charset=utf-8"

# path -> (status, body, content-type)
SiteRoutes = Mapping[str, tuple[int, str, str]]


def legal_page(text: str, *, title: str = "Legal") -> str:
    """Wrap *text* in a full HTML document, long enough to pass the size gate."""
    return (
        "<!DOCTYPE html><html><head>"
        f"<title>{title}</title><style>body {{ color: #333; }}</style>"
        "</head><body><nav><a href='/'>Home</a><a href='/shop'>Shop</a></nav>"
        f"<main><h1>{title}</h1><p>{text}</p></main></body></html>"
    )


class FakeSite:
    """MockTransport handler serving fixed routes; everything else is 404."""

    def __init__(self, routes: SiteRoutes | None = None) -> None:
        self.routes = dict(routes or {})
        self.requested: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requested.append(request.url.path)
        status, body, content_type = self.routes.get(request.url.path, (404, "Not Found", "text/plain"))
        return httpx.Response(status, text=body, headers={"content-type": content_type})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))
