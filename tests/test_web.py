from __future__ import annotations

import json

import pytest
from fastapi import HTTPException

from strtranslate.rules import RuleSet
from strtranslate.web import WebConfig, create_app


def _find_route(app, path: str, method: str):
    method = method.upper()
    for route in app.router.routes:
        if getattr(route, "path", None) == path and method in getattr(route, "methods", set()):
            return route.endpoint
    raise RuntimeError(f"Route {method} {path} not found")


def _preset(mode: str = "distinct") -> RuleSet:
    ruleset = RuleSet(mode=mode)
    ruleset.extend(["A", "B"], ["B", "C"])
    return ruleset


def test_health_reports_preset() -> None:
    app = create_app(WebConfig(rules=_preset()))
    response = _find_route(app, "/api/health", "GET")()
    payload = json.loads(response.body)
    assert payload == {"status": "ok", "mode": "distinct", "rules": 2}


def test_translate_with_explicit_pairs() -> None:
    app = create_app()
    route = _find_route(app, "/api/translate", "POST")
    response = route({"text": "A", "searches": ["A", "B"], "replacements": ["B", "C"], "mode": "cascade"})
    assert response.status_code == 200
    assert json.loads(response.body) == {"text": "C", "mode": "cascade"}

    response = route({"text": "AAA", "searches": [None, "", "A"], "replacements": ["X", "Y", "Z"]})
    assert json.loads(response.body) == {"text": "ZZZ", "mode": "distinct"}


def test_translate_falls_back_to_preset_rules() -> None:
    app = create_app(WebConfig(rules=_preset("cascade")))
    route = _find_route(app, "/api/translate", "POST")
    assert json.loads(route({"text": "A"}).body) == {"text": "C", "mode": "cascade"}
    assert json.loads(route({"text": "A", "mode": "distinct"}).body) == {"text": "B", "mode": "distinct"}


def test_translate_shape_mismatch_is_bad_request() -> None:
    route = _find_route(create_app(), "/api/translate", "POST")
    with pytest.raises(HTTPException) as excinfo:
        route({"text": "abc", "searches": ["a", "b"], "replacements": ["x", "y", "z"]})
    assert excinfo.value.status_code == 400
    assert "mismatched" in excinfo.value.detail


@pytest.mark.parametrize(
    "payload",
    [
        {"searches": [], "replacements": []},
        {"text": 1},
        {"text": "a", "searches": "a", "replacements": ["b"]},
        {"text": "a", "mode": "regex"},
        {"text": "a", "searches": [1], "replacements": ["b"]},
    ],
)
def test_translate_rejects_invalid_payloads(payload) -> None:
    route = _find_route(create_app(), "/api/translate", "POST")
    with pytest.raises(HTTPException) as excinfo:
        route(payload)
    assert excinfo.value.status_code == 400


def test_translate_enforces_length_limit() -> None:
    route = _find_route(create_app(WebConfig(max_text_length=3)), "/api/translate", "POST")
    with pytest.raises(HTTPException) as excinfo:
        route({"text": "abcd"})
    assert excinfo.value.status_code == 413


def test_remove_endpoint() -> None:
    route = _find_route(create_app(), "/api/remove", "POST")
    response = route({"source": ["a", None, "b", "a"], "removals": ["a"]})
    assert json.loads(response.body) == {"result": [None, "b"]}
    response = route({"source": ["a", None]})
    assert json.loads(response.body) == {"result": ["a", None]}
    with pytest.raises(HTTPException) as excinfo:
        route({"source": [["a"]], "removals": ["a"]})
    assert excinfo.value.status_code == 400
