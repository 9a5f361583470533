from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from .core import (
    MODE_CASCADE,
    MODE_DISTINCT,
    check_pair_lengths,
    coerce_text_array,
    resolve_mode,
    translate,
)

__all__ = [
    "TranslateRule",
    "RuleSet",
    "parse_rules",
    "load_rules",
    "write_rules",
]


@dataclass
class TranslateRule:
    search: str | None
    replacement: str | None


@dataclass
class RuleSet:
    rules: list[TranslateRule] = field(default_factory=list)
    mode: str = MODE_DISTINCT

    @property
    def searches(self) -> list[str | None]:
        return [rule.search for rule in self.rules]

    @property
    def replacements(self) -> list[str | None]:
        return [rule.replacement for rule in self.rules]

    @property
    def cascade(self) -> bool:
        return self.mode == MODE_CASCADE

    def extend(self, searches: Iterable[str | None], replacements: Iterable[str | None]) -> None:
        search_list = coerce_text_array(searches, "searches")
        replacement_list = coerce_text_array(replacements, "replacements")
        check_pair_lengths(len(search_list), len(replacement_list))
        for search, replacement in zip(search_list, replacement_list):
            self.rules.append(TranslateRule(search=search, replacement=replacement))

    def apply(self, text: str) -> str:
        return translate(text, self.searches, self.replacements, cascade=self.cascade)


def _text_or_none(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _rule_from_entry(entry: object) -> TranslateRule | None:
    if isinstance(entry, Mapping):
        return TranslateRule(
            search=_text_or_none(entry.get("search")),
            replacement=_text_or_none(entry.get("replacement")),
        )
    if isinstance(entry, list) and len(entry) == 2:
        return TranslateRule(search=_text_or_none(entry[0]), replacement=_text_or_none(entry[1]))
    return None


def parse_rules(raw: object, *, source: str = "rules") -> RuleSet:
    if not isinstance(raw, Mapping):
        raise ValueError(f"{source} must contain a JSON object.")
    rules_payload = raw.get("rules")
    if not isinstance(rules_payload, list):
        raise ValueError(f"{source} must contain a 'rules' array.")
    mode_value = raw.get("mode")
    if mode_value is not None and not isinstance(mode_value, str):
        raise ValueError(f"{source}: 'mode' must be a string.")
    try:
        mode = resolve_mode(mode_value)
    except ValueError as exc:
        raise ValueError(f"{source}: {exc}") from exc
    rules: list[TranslateRule] = []
    for entry in rules_payload:
        rule = _rule_from_entry(entry)
        if rule is None:
            continue
        rules.append(rule)
    return RuleSet(rules=rules, mode=mode)


def load_rules(path: Path) -> RuleSet:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Failed to parse rules file: {path}") from exc
    return parse_rules(raw, source=path.name)


def write_rules(path: Path, ruleset: RuleSet) -> Path:
    payload = {
        "mode": ruleset.mode,
        "rules": [
            {"search": rule.search, "replacement": rule.replacement}
            for rule in ruleset.rules
        ],
    }
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return path
