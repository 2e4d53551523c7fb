"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class PhaseSettings:
    """Length of one cycle phase, from `[focus]`, `[short_break]` or `[long_break]`."""
    duration_minutes: float

    @property
    def duration_seconds(self) -> int:
        return int(self.duration_minutes * 60)


@dataclass(frozen=True)
class LongBreakSettings(PhaseSettings):
    """Long-break length plus how many focus intervals precede it (0 disables)."""
    interval: int = 4


@dataclass(frozen=True)
class TimerSettings:
    """Countdown behaviour settings from `[timer]`."""
    tick_seconds: float = 60.0
    autostart: bool = True


@dataclass(frozen=True)
class UIServerSettings:
    """Websocket status server settings from `[ui_server]`."""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    focus: PhaseSettings = field(default_factory=lambda: PhaseSettings(25))
    short_break: PhaseSettings = field(default_factory=lambda: PhaseSettings(5))
    long_break: LongBreakSettings = field(
        default_factory=lambda: LongBreakSettings(15, interval=4)
    )
    timer: TimerSettings = field(default_factory=TimerSettings)
    ui_server: UIServerSettings = field(default_factory=UIServerSettings)
    source_file: str = ""
