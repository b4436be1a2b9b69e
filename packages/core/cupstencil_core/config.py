"""Persistent render settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from cupstencil_renderer.models import (
    DEFAULT_SAMPLE_DENSITY,
    DEFAULT_THRESHOLD,
    FIT_MODES,
    MAX_UPLOAD_BYTES,
    TARGET_FORMATS,
    TONE_MODES,
    RenderOptions,
)

CONFIG_VERSION = 1


@dataclass
class RenderDefaults:
    tone_mode: str = "binary"
    threshold: int = DEFAULT_THRESHOLD
    sample_density: int = DEFAULT_SAMPLE_DENSITY
    fit: str = "contain"
    target_format: str = "auto"


@dataclass
class UploadConfig:
    max_bytes: int = MAX_UPLOAD_BYTES


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    render: RenderDefaults = field(default_factory=RenderDefaults)
    upload: UploadConfig = field(default_factory=UploadConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)

    def render_options(self, **overrides: Any) -> RenderOptions:
        values: dict[str, Any] = {
            "tone_mode": self.render.tone_mode,
            "threshold": self.render.threshold,
            "sample_density": self.render.sample_density,
            "fit": self.render.fit,
            "max_bytes": self.upload.max_bytes,
            "target_format": self.render.target_format,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return RenderOptions(**values)


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "CupStencil"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "CupStencil"
    return Path.home() / ".config" / "cupstencil"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_render(cfg: AppConfig) -> None:
    defaults = RenderDefaults()
    r = cfg.render
    if r.tone_mode not in TONE_MODES:
        r.tone_mode = defaults.tone_mode
    if r.fit not in FIT_MODES:
        r.fit = defaults.fit
    if r.target_format not in TARGET_FORMATS:
        r.target_format = defaults.target_format
    try:
        r.threshold = max(0, min(255, int(r.threshold)))
    except (TypeError, ValueError):
        r.threshold = defaults.threshold
    try:
        r.sample_density = max(2, min(32, int(r.sample_density)))
    except (TypeError, ValueError):
        r.sample_density = defaults.sample_density


def _normalize_upload(cfg: AppConfig) -> None:
    try:
        cfg.upload.max_bytes = max(1, int(cfg.upload.max_bytes))
    except (TypeError, ValueError):
        cfg.upload.max_bytes = MAX_UPLOAD_BYTES


def _normalize_diagnostics(cfg: AppConfig) -> None:
    try:
        cfg.diagnostics.keep_log_files = max(2, int(cfg.diagnostics.keep_log_files))
    except (TypeError, ValueError):
        cfg.diagnostics.keep_log_files = DiagnosticsConfig().keep_log_files


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=CONFIG_VERSION,
        render=_merge(RenderDefaults, raw.get("render", {})),
        upload=_merge(UploadConfig, raw.get("upload", {})),
        diagnostics=_merge(DiagnosticsConfig, raw.get("diagnostics", {})),
    )

    _normalize_render(cfg)
    _normalize_upload(cfg)
    _normalize_diagnostics(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
