# kmod_cli.py
from __future__ import annotations

import logging
import re
import subprocess
from enum import Enum
from typing import List, Optional, Sequence

from errors import ErrorKind, ModuleCheckFailed, ModuleLoadFailed


logger = logging.getLogger(__name__)

LOOPBACK_MODULE = "v4l2loopback"
LSMOD_TIMEOUT_S = 5.0


def _run(cmd: Sequence[str], timeout: Optional[float] = None) -> subprocess.CompletedProcess[str]:
    return subprocess.run(list(cmd), capture_output=True, text=True, timeout=timeout)


def lsmod_text() -> str:
    try:
        p = _run(["lsmod"], timeout=LSMOD_TIMEOUT_S)
    except (OSError, subprocess.SubprocessError) as e:
        raise ModuleCheckFailed(f"lsmod failed: {e}") from e

    if p.returncode != 0:
        msg = (p.stderr or p.stdout).strip()
        raise ModuleCheckFailed(f"lsmod failed: {msg}")

    return p.stdout


def listing_has_module(listing: str, name: str) -> bool:
    pattern = re.compile("^" + re.escape(name) + r"\b", re.MULTILINE)
    return pattern.search(listing) is not None


def is_module_loaded(name: str, listing: Optional[str] = None) -> bool:
    """
    Live check against `lsmod`; a failing listing counts as "not loaded".
    """
    if listing is None:
        try:
            listing = lsmod_text()
        except ModuleCheckFailed as e:
            logger.warning("%s: %s", ErrorKind.MODULE_CHECK_FAILED.value, e)
            return False
    return listing_has_module(listing, name)


def loopback_params(
    video_nr: int = 10,
    card_label: str = "VirtualCam",
    exclusive_caps: bool = True,
    devices: int = 1,
) -> List[str]:
    return [
        f"devices={devices}",
        f"video_nr={video_nr}",
        f"card_label={card_label}",
        f"exclusive_caps={1 if exclusive_caps else 0}",
    ]


def load_module(name: str, params: Sequence[str], helper: str = "pkexec") -> None:
    cmd = [helper, "modprobe", name, *params] if helper else ["modprobe", name, *params]
    logger.info("Loading kernel module: %s", " ".join(cmd))
    try:
        p = _run(cmd)
    except OSError as e:
        raise ModuleLoadFailed(f"{cmd[0]} could not be launched: {e}") from e

    if p.returncode != 0:
        raise ModuleLoadFailed(f"{' '.join(cmd[:3])} exited with code {p.returncode}")

    logger.info("Kernel module %s loaded", name)


class ModuleOutcome(Enum):
    ALREADY_LOADED = "already_loaded"
    LOADED = "loaded"
    BUSY = "busy"


class LoopbackModule:
    """Module button backend: only one check/load runs at a time."""

    def __init__(
        self,
        name: str = LOOPBACK_MODULE,
        params: Optional[Sequence[str]] = None,
        helper: str = "pkexec",
    ) -> None:
        self.name = name
        self.params: List[str] = list(params) if params is not None else loopback_params()
        self.helper = helper
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def is_loaded(self) -> bool:
        return is_module_loaded(self.name)

    def ensure_loaded(self) -> ModuleOutcome:
        if self._busy:
            logger.debug("Module action already in flight; ignoring")
            return ModuleOutcome.BUSY

        self._busy = True
        try:
            if self.is_loaded():
                return ModuleOutcome.ALREADY_LOADED
            load_module(self.name, self.params, helper=self.helper)
            return ModuleOutcome.LOADED
        finally:
            self._busy = False
