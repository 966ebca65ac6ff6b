from __future__ import annotations
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

DEFAULT_SETTINGS_PATH = str(Path(__file__).parent / "edit_settings.yml")


@dataclass(frozen=True)
class OperationSettings:
    temperature: float
    max_tokens: int = 4096
    strict_markdown: bool = False


DEFAULT_OPERATION_SETTINGS: Dict[str, OperationSettings] = {
    "formatMarkdown": OperationSettings(temperature=0.1),
    "fixGrammar": OperationSettings(temperature=0.1),
    "addHeadings": OperationSettings(temperature=0.3),
    "improveStructure": OperationSettings(temperature=0.4),
    "makeConcise": OperationSettings(temperature=0.2),
    "expandContent": OperationSettings(temperature=0.5),
}


def load_settings_pack(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_edit_settings(pack: Optional[Dict[str, Any]] = None) -> Dict[str, OperationSettings]:
    """Merge a settings pack over the built-in defaults, key by key."""
    settings = dict(DEFAULT_OPERATION_SETTINGS)
    for edit_type, raw in ((pack or {}).get("operations") or {}).items():
        base = settings.get(edit_type)
        if base is None:
            raise ValueError(f"Unknown edit type in settings pack: {edit_type}")
        raw = raw or {}
        settings[edit_type] = replace(
            base,
            temperature=float(raw.get("temperature", base.temperature)),
            max_tokens=int(raw.get("max_tokens", base.max_tokens)),
            strict_markdown=bool(raw.get("strict_markdown", base.strict_markdown)),
        )
    return settings


_active: Optional[Dict[str, OperationSettings]] = None


def get_operation_settings(edit_type: str) -> OperationSettings:
    """Settings for one edit type from the packaged settings file, loaded once."""
    global _active
    if _active is None:
        path = Path(DEFAULT_SETTINGS_PATH)
        _active = load_edit_settings(load_settings_pack(str(path)) if path.exists() else None)
    return _active[edit_type]


def use_edit_settings(settings: Optional[Dict[str, OperationSettings]]) -> None:
    """Replace the active settings (None reloads the packaged file on next use)."""
    global _active
    _active = settings
