from __future__ import annotations

from dataclasses import dataclass, field

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import JSONResponse

from .arrays import remove_matching
from .core import MODE_CASCADE, ShapeMismatchError, resolve_mode, translate
from .rules import RuleSet

__all__ = ["WebConfig", "create_app"]


@dataclass
class WebConfig:
    rules: RuleSet = field(default_factory=RuleSet)
    max_text_length: int | None = None


def _optional_array(payload: dict[str, object], key: str) -> object:
    value = payload.get(key)
    if value is not None and not isinstance(value, list):
        raise HTTPException(status_code=400, detail=f"{key} must be an array or null.")
    return value


def create_app(config: WebConfig | None = None) -> FastAPI:
    config = config or WebConfig()
    preset = config.rules

    app = FastAPI(title="strtranslate")
    app.state.config = config

    @app.get("/api/health")
    def api_health() -> JSONResponse:
        return JSONResponse({"status": "ok", "mode": preset.mode, "rules": len(preset.rules)})

    @app.post("/api/translate")
    def api_translate(payload: dict[str, object] = Body(...)) -> JSONResponse:
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload.")
        text = payload.get("text")
        if not isinstance(text, str):
            raise HTTPException(status_code=400, detail="text must be a string.")
        if config.max_text_length is not None and len(text) > config.max_text_length:
            raise HTTPException(status_code=413, detail="text exceeds the configured length limit.")
        searches = _optional_array(payload, "searches")
        replacements = _optional_array(payload, "replacements")
        mode_value = payload.get("mode")
        if mode_value is not None and not isinstance(mode_value, str):
            raise HTTPException(status_code=400, detail="mode must be a string.")
        use_preset = searches is None and replacements is None
        if use_preset:
            searches = preset.searches
            replacements = preset.replacements
            if mode_value is None:
                mode_value = preset.mode
        try:
            mode = resolve_mode(mode_value)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        try:
            result = translate(text, searches, replacements, cascade=mode == MODE_CASCADE)
        except (ShapeMismatchError, TypeError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return JSONResponse({"text": result, "mode": mode})

    @app.post("/api/remove")
    def api_remove(payload: dict[str, object] = Body(...)) -> JSONResponse:
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload.")
        source = _optional_array(payload, "source")
        removals = _optional_array(payload, "removals")
        try:
            result = remove_matching(source, removals)
        except (ShapeMismatchError, TypeError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return JSONResponse({"result": result})

    return app
