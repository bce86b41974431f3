"""Root conftest for component engine tests.

Provides:
- Sample WordPress REST responses (builder tree, empty meta, plain post)
- A MockTransport factory that serves those responses per component id
- Validated connection configs with and without credentials
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest

from component_engine.schemas import ConnectionConfig

BASE_URL = "https://components.example.org"


# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------


@pytest.fixture
def connection() -> ConnectionConfig:
    return ConnectionConfig(base_url=BASE_URL)


@pytest.fixture
def authed_connection() -> ConnectionConfig:
    return ConnectionConfig(
        base_url=BASE_URL,
        username="editor",
        application_password="abcd efgh ijkl mnop",
    )


# ---------------------------------------------------------------------------
# Sample WordPress responses
# ---------------------------------------------------------------------------


def heading_tree() -> List[Dict[str, Any]]:
    return [
        {"kind": "Widget", "widget_kind": "heading", "settings": {"title": "Pricing"}},
    ]


@pytest.fixture
def heading_response() -> Dict[str, Any]:
    """Post 42 storing a one-heading tree as a JSON string in _elementor_data."""
    return {
        "id": 42,
        "title": {"rendered": "Pricing"},
        "meta": {"_elementor_data": json.dumps(heading_tree())},
    }


@pytest.fixture
def section_response() -> Dict[str, Any]:
    """Post 7 with a full section → column → widgets tree."""
    tree = [
        {
            "id": "sec0001",
            "elType": "section",
            "isInner": False,
            "settings": {"background_color": "#F5F5F5"},
            "elements": [
                {
                    "id": "col0001",
                    "elType": "column",
                    "settings": {"_column_size": 100},
                    "elements": [
                        {
                            "id": "wid0001",
                            "elType": "widget",
                            "widgetType": "heading",
                            "settings": {"title": "Hero", "title_color": "#1E293B"},
                            "elements": [],
                        },
                        {
                            "id": "wid0002",
                            "elType": "widget",
                            "widgetType": "text-editor",
                            "settings": {"editor": "<p>Build <strong>faster</strong></p>"},
                            "elements": [],
                        },
                    ],
                }
            ],
        }
    ]
    return {
        "id": 7,
        "title": {"rendered": "Hero Section"},
        "meta": {"_elementor_data": json.dumps(tree), "_elementor_version": "3.18.0"},
    }


@pytest.fixture
def empty_response() -> Dict[str, Any]:
    """Post with no builder data; WordPress serializes empty meta as []."""
    return {"id": 9, "title": {"rendered": "Empty"}, "meta": []}


@pytest.fixture
def plain_post_response() -> Dict[str, Any]:
    """Regular post with content, excerpt and a featured image."""
    return {
        "id": 11,
        "title": {"rendered": "About &amp; Team"},
        "meta": {},
        "content": {
            "rendered": (
                '<div class="wp-block" style="color:red" onclick="track()">'
                "<p>We build things.</p><script>alert(1)</script></div>"
            )
        },
        "excerpt": {"rendered": "<p>Short summary</p>"},
        "featured_media": 301,
        "_embedded": {
            "wp:featuredmedia": [{"source_url": "https://cdn.example.org/team.jpg"}]
        },
    }


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def wordpress_transport() -> Callable[..., Tuple[httpx.MockTransport, List[httpx.Request]]]:
    """Factory: ``transport, requests = wordpress_transport({42: body, 2: 404})``.

    Values are a JSON body (served with 200), an int status code, or an
    httpx.Response. Unknown ids get 404. Every request is recorded.
    """

    def factory(routes: Dict[int, Any]):
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            component_id = int(request.url.path.rstrip("/").rsplit("/", 1)[-1])
            route = routes.get(component_id, 404)
            if isinstance(route, httpx.Response):
                return route
            if isinstance(route, int):
                return httpx.Response(route, json={"code": "rest_error"})
            return httpx.Response(200, json=route)

        return httpx.MockTransport(handler), requests

    return factory
