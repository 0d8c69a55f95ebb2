# store_config.py
from __future__ import annotations

import configparser
import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ffmpeg_cmd import DEFAULT_TRANSCODER
from kmod_cli import LOOPBACK_MODULE, loopback_params
from supervisor import SupervisorSettings


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_TEXT = """\
[Stream]
transcoder = ffmpeg
device =
start_timeout_ms = 3000
stop_grace_ms = 1000
kill_timeout_ms = 3000
settle_delay_ms = 150

[Module]
name = v4l2loopback
helper = pkexec
video_nr = 10
card_label = VirtualCam
exclusive_caps = 1

[App]
last_dir =
log_level = INFO
"""

_DEFAULTS = configparser.ConfigParser(interpolation=None)
_DEFAULTS.read_string(DEFAULT_CONFIG_TEXT)


def _linux_xdg_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def user_config_dir(app_name: str) -> Path:
    sysname = (platform.system() or "").lower()
    if sysname.startswith("linux"):
        return _linux_xdg_config_dir() / app_name
    return Path.home() / ".config" / app_name


@dataclass(frozen=True)
class ModuleSettings:
    name: str = LOOPBACK_MODULE
    helper: str = "pkexec"
    video_nr: int = 10
    card_label: str = "VirtualCam"
    exclusive_caps: bool = True

    @property
    def params(self) -> List[str]:
        return loopback_params(
            video_nr=self.video_nr,
            card_label=self.card_label,
            exclusive_caps=self.exclusive_caps,
        )


@dataclass(frozen=True)
class AppSettings:
    stream: SupervisorSettings
    module: ModuleSettings
    last_dir: str = ""
    log_level: str = "INFO"


def _get_int(cfg: configparser.ConfigParser, section: str, key: str) -> int:
    fallback = _DEFAULTS.getint(section, key)
    try:
        v = cfg.getint(section, key, fallback=fallback)
    except ValueError:
        logger.warning("Invalid integer for [%s] %s, using %s", section, key, fallback)
        return fallback
    if v < 0:
        logger.warning("Negative value for [%s] %s, using %s", section, key, fallback)
        return fallback
    return v


def _get_bool(cfg: configparser.ConfigParser, section: str, key: str) -> bool:
    fallback = _DEFAULTS.getboolean(section, key)
    try:
        return cfg.getboolean(section, key, fallback=fallback)
    except ValueError:
        logger.warning("Invalid boolean for [%s] %s, using %s", section, key, fallback)
        return fallback


def _get_str(cfg: configparser.ConfigParser, section: str, key: str) -> str:
    return (cfg.get(section, key, fallback="") or "").strip()


def load_settings(cfg: configparser.ConfigParser) -> AppSettings:
    video_nr = _get_int(cfg, "Module", "video_nr")
    module = ModuleSettings(
        name=_get_str(cfg, "Module", "name") or LOOPBACK_MODULE,
        helper=_get_str(cfg, "Module", "helper"),
        video_nr=video_nr,
        card_label=_get_str(cfg, "Module", "card_label") or "VirtualCam",
        exclusive_caps=_get_bool(cfg, "Module", "exclusive_caps"),
    )

    stream = SupervisorSettings(
        transcoder=_get_str(cfg, "Stream", "transcoder") or DEFAULT_TRANSCODER,
        device_path=_get_str(cfg, "Stream", "device") or f"/dev/video{video_nr}",
        start_timeout_ms=_get_int(cfg, "Stream", "start_timeout_ms"),
        stop_grace_ms=_get_int(cfg, "Stream", "stop_grace_ms"),
        kill_timeout_ms=_get_int(cfg, "Stream", "kill_timeout_ms"),
        settle_delay_ms=_get_int(cfg, "Stream", "settle_delay_ms"),
    )

    return AppSettings(
        stream=stream,
        module=module,
        last_dir=_get_str(cfg, "App", "last_dir"),
        log_level=(_get_str(cfg, "App", "log_level") or "INFO").upper(),
    )


@dataclass(frozen=True)
class ConfigStore:
    app_name: str = "VirtualCam"
    filename: str = "virtualcam.cfg"

    @property
    def dir_path(self) -> Path:
        return user_config_dir(self.app_name)

    @property
    def file_path(self) -> Path:
        return self.dir_path / self.filename

    def ensure_exists(self) -> None:
        self.dir_path.mkdir(parents=True, exist_ok=True)
        if not self.file_path.exists():
            self.file_path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")

    def load(self) -> configparser.ConfigParser:
        self.ensure_exists()
        cfg = configparser.ConfigParser(interpolation=None)
        cfg.read(self.file_path, encoding="utf-8")

        for section in _DEFAULTS.sections():
            if not cfg.has_section(section):
                cfg.add_section(section)
            for key, value in _DEFAULTS.items(section):
                if not cfg.has_option(section, key):
                    cfg.set(section, key, value)

        return cfg

    def save(self, cfg: configparser.ConfigParser) -> None:
        self.ensure_exists()
        with self.file_path.open("w", encoding="utf-8") as f:
            cfg.write(f)

    def settings(self) -> AppSettings:
        return load_settings(self.load())

    def record_last_dir(self, directory: str) -> None:
        cfg = self.load()
        d = (directory or "").strip()
        if not d or cfg.get("App", "last_dir", fallback="").strip() == d:
            return
        cfg.set("App", "last_dir", d)
        self.save(cfg)
