"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from typing import Any, Mapping

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    LongBreakSettings,
    PhaseSettings,
    TimerSettings,
    UIServerSettings,
)


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    focus = _parse_phase_settings(_section(raw, "focus"), "focus", default_minutes=25)
    short_break = _parse_phase_settings(
        _section(raw, "short_break"),
        "short_break",
        default_minutes=5,
    )
    long_break = _parse_long_break_settings(_section(raw, "long_break"))
    timer = _parse_timer_settings(_section(raw, "timer"))
    ui_server = _parse_ui_server_settings(_section(raw, "ui_server"))

    return AppConfig(
        focus=focus,
        short_break=short_break,
        long_break=long_break,
        timer=timer,
        ui_server=ui_server,
        source_file=source_file,
    )


def _parse_phase_settings(
    section: Mapping[str, Any],
    section_name: str,
    *,
    default_minutes: float,
) -> PhaseSettings:
    return PhaseSettings(
        duration_minutes=_positive_minutes(
            section.get("duration_minutes", default_minutes),
            f"{section_name}.duration_minutes",
        )
    )


def _parse_long_break_settings(section: Mapping[str, Any]) -> LongBreakSettings:
    interval = _as_int(section.get("interval", 4), "long_break.interval")
    if interval < 0:
        raise AppConfigurationError("long_break.interval must not be negative.")
    return LongBreakSettings(
        duration_minutes=_positive_minutes(
            section.get("duration_minutes", 15),
            "long_break.duration_minutes",
        ),
        interval=interval,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    tick_seconds = _as_float(section.get("tick_seconds", 60), "timer.tick_seconds")
    if tick_seconds <= 0:
        raise AppConfigurationError("timer.tick_seconds must be greater than zero.")
    return TimerSettings(
        tick_seconds=tick_seconds,
        autostart=_as_bool(section.get("autostart", True), "timer.autostart"),
    )


def _parse_ui_server_settings(section: Mapping[str, Any]) -> UIServerSettings:
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", False), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _positive_minutes(value: Any, field: str) -> float:
    minutes = _as_float(value, field)
    if minutes <= 0:
        raise AppConfigurationError(f"{field} must be greater than zero.")
    return minutes


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a number.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a number.") from error
    raise AppConfigurationError(f"{field} must be a number.")
