from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, TypedDict

CONFIRM_BEHAVIORS = (
    "jump_default",
    "cancel",
)

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{8}|[0-9a-fA-F]{6})$")


class FlashSettings(TypedDict, total=False):
    labels: str
    allow_uppercase_labels: bool
    min_pattern_length: int
    auto_jump: bool
    search_whole_file: bool
    multi_window: bool
    confirm_behavior: str
    show_backdrop: bool
    backdrop_alpha: int
    highlight_matches: bool
    label_background_color: str
    label_foreground_color: str
    default_match_background_color: str
    match_highlight_color: str
    label_font_scale: float


class FlashJumpSettings(TypedDict, total=False):
    flash: FlashSettings
    keybindings: dict[str, dict[str, list[str]]]


def default_flash_settings() -> FlashSettings:
    return {
        "labels": "asdfghjklqwertyuiopzxcvbnm",
        "allow_uppercase_labels": True,
        "min_pattern_length": 2,
        "auto_jump": False,
        "search_whole_file": False,
        "multi_window": True,
        "confirm_behavior": "jump_default",
        "show_backdrop": False,
        "backdrop_alpha": 128,
        "highlight_matches": True,
        "label_background_color": "#8B4545",
        "label_foreground_color": "#FFFFFF",
        "default_match_background_color": "#FFA500",
        "match_highlight_color": "#50FFFF00",
        "label_font_scale": 0.85,
    }


def normalize_flash_settings(raw: Any) -> FlashSettings:
    defaults = default_flash_settings()
    data = dict(defaults)
    if isinstance(raw, dict):
        for key, value in raw.items():
            data[str(key)] = value

    def _clamp_int(value: Any, low: int, high: int, fallback: int) -> int:
        try:
            return max(low, min(high, int(value)))
        except Exception:
            return fallback

    def _clamp_float(value: Any, low: float, high: float, fallback: float) -> float:
        try:
            return max(low, min(high, float(value)))
        except Exception:
            return fallback

    def _color(key: str) -> str:
        text = str(data.get(key) or "").strip()
        return text if _COLOR_RE.match(text) else str(defaults[key])

    labels = "".join(ch for ch in str(data.get("labels") or "") if not ch.isspace())
    if not labels:
        labels = defaults["labels"]

    confirm = str(data.get("confirm_behavior") or "").strip().lower()
    if confirm not in CONFIRM_BEHAVIORS:
        confirm = defaults["confirm_behavior"]

    return {
        "labels": labels,
        "allow_uppercase_labels": bool(data.get("allow_uppercase_labels", defaults["allow_uppercase_labels"])),
        "min_pattern_length": _clamp_int(data.get("min_pattern_length"), 0, 10, int(defaults["min_pattern_length"])),
        "auto_jump": bool(data.get("auto_jump", defaults["auto_jump"])),
        "search_whole_file": bool(data.get("search_whole_file", defaults["search_whole_file"])),
        "multi_window": bool(data.get("multi_window", defaults["multi_window"])),
        "confirm_behavior": confirm,
        "show_backdrop": bool(data.get("show_backdrop", defaults["show_backdrop"])),
        "backdrop_alpha": _clamp_int(data.get("backdrop_alpha"), 0, 255, int(defaults["backdrop_alpha"])),
        "highlight_matches": bool(data.get("highlight_matches", defaults["highlight_matches"])),
        "label_background_color": _color("label_background_color"),
        "label_foreground_color": _color("label_foreground_color"),
        "default_match_background_color": _color("default_match_background_color"),
        "match_highlight_color": _color("match_highlight_color"),
        "label_font_scale": _clamp_float(data.get("label_font_scale"), 0.3, 2.0, float(defaults["label_font_scale"])),
    }


@dataclass(frozen=True, slots=True)
class FlashConfig:
    labels: str
    allow_uppercase_labels: bool
    min_pattern_length: int
    auto_jump: bool
    search_whole_file: bool
    multi_window: bool
    confirm_behavior: str
    show_backdrop: bool
    backdrop_alpha: int
    highlight_matches: bool
    label_background_color: str
    label_foreground_color: str
    default_match_background_color: str
    match_highlight_color: str
    label_font_scale: float

    @classmethod
    def from_mapping(cls, data: Any) -> "FlashConfig":
        n = normalize_flash_settings(data)
        return cls(
            labels=str(n["labels"]),
            allow_uppercase_labels=bool(n["allow_uppercase_labels"]),
            min_pattern_length=int(n["min_pattern_length"]),
            auto_jump=bool(n["auto_jump"]),
            search_whole_file=bool(n["search_whole_file"]),
            multi_window=bool(n["multi_window"]),
            confirm_behavior=str(n["confirm_behavior"]),
            show_backdrop=bool(n["show_backdrop"]),
            backdrop_alpha=int(n["backdrop_alpha"]),
            highlight_matches=bool(n["highlight_matches"]),
            label_background_color=str(n["label_background_color"]),
            label_foreground_color=str(n["label_foreground_color"]),
            default_match_background_color=str(n["default_match_background_color"]),
            match_highlight_color=str(n["match_highlight_color"]),
            label_font_scale=float(n["label_font_scale"]),
        )

    @classmethod
    def defaults(cls) -> "FlashConfig":
        return cls.from_mapping({})

    def label_chars(self) -> list[str]:
        chars = list(self.labels)
        if self.allow_uppercase_labels:
            chars += [ch.upper() for ch in self.labels]
        return list(dict.fromkeys(chars))
