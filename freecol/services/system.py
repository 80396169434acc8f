"""Interpreter and memory viability checks."""

import os
import platform
import sys
from dataclasses import dataclass

import structlog

from ..models.config import LaunchConfig
from ..models.messages import MessageTemplate

log = structlog.stdlib.get_logger()

RUNTIME_VERSION_MIN: tuple[int, int] = (3, 11)
MEMORY_MIN_MB = 128


@dataclass(frozen=True)
class SystemProbe:
    """What the host offers. Tests substitute their own values."""
    runtime_version: tuple[int, int]
    memory_bytes: int | None  # None when it cannot be determined

    @classmethod
    def detect(cls) -> "SystemProbe":
        return cls(
            runtime_version=(sys.version_info.major, sys.version_info.minor),
            memory_bytes=physical_memory(),
        )

    @property
    def runtime_version_text(self) -> str:
        return ".".join(str(part) for part in self.runtime_version)


def physical_memory() -> int | None:
    """Total physical memory in bytes, if the platform reports it."""
    try:
        pages = os.sysconf("SC_PHYS_PAGES")
        page_size = os.sysconf("SC_PAGE_SIZE")
    except (AttributeError, ValueError, OSError):
        return None
    if pages <= 0 or page_size <= 0:
        return None
    return pages * page_size


def check_system(config: LaunchConfig, probe: SystemProbe) -> MessageTemplate | None:
    """Run the checks the configuration has not switched off.

    Returns:
        A message for the first failed check, or None
    """
    if config.runtime_check and probe.runtime_version < RUNTIME_VERSION_MIN:
        return MessageTemplate.template(
            "main.runtimeVersion",
            version=probe.runtime_version_text,
            minVersion=".".join(str(part) for part in RUNTIME_VERSION_MIN),
        )
    if (
        config.memory_check
        and probe.memory_bytes is not None
        and probe.memory_bytes < MEMORY_MIN_MB * 1_000_000
    ):
        return MessageTemplate.template(
            "main.memory", memory=probe.memory_bytes, minMemory=MEMORY_MIN_MB
        )
    log.debug(
        "System checks passed",
        runtime=probe.runtime_version_text,
        implementation=platform.python_implementation(),
        memory=probe.memory_bytes,
    )
    return None
