# Pico Battery Bridge - Device Dump Source
# Author: IntelligentToasters
# License: GNU General Public License v3.0
#
# Runs the adb device bridge to fetch `dumpsys` diagnostic text from the
# connected headset.
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""pico_battery.dump

Sources of raw `dumpsys` text.

- `Subsystem`: which dump to ask for (headset battery or controller service).
- `DumpSource`: the interface the monitor depends on, `fetch(subsystem)`.
  Tests pass their own implementation so nothing spawns a process.
- `AdbDumpSource`: the real implementation, running
  `adb shell dumpsys <service>` and returning its standard output.
- `start_server`: runs `adb start-server` once before polling begins.

Every call blocks until adb exits. stderr is always discarded. Anything
that keeps us from getting decoded stdout (adb missing, non-zero exit,
timeout, bytes that are not UTF-8) is raised as `SubprocessError`; there is
no retry at this layer.
"""
from __future__ import annotations

import enum
import logging
import subprocess
from typing import List, Optional, Protocol

from .exceptions import SubprocessError

log = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "adb"
# A hung adb would otherwise stall the poll loop indefinitely
DEFAULT_TIMEOUT = 30.0


class Subsystem(enum.Enum):
    BATTERY = "battery"
    CONTROLLER_SERVICE = "pxrcontrollerservice"


class DumpSource(Protocol):
    def fetch(self, subsystem: Subsystem) -> str:
        ...


def _run(args: List[str], timeout: Optional[float], capture: bool) -> bytes:
    try:
        result = subprocess.run(
            args,
            stdout=subprocess.PIPE if capture else subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
            check=True,
        )
    except FileNotFoundError as exc:
        raise SubprocessError(f"{args[0]} not found on PATH") from exc
    except subprocess.TimeoutExpired as exc:
        raise SubprocessError(f"{' '.join(args)} timed out after {timeout}s") from exc
    except subprocess.CalledProcessError as exc:
        raise SubprocessError(f"{' '.join(args)} exited with status {exc.returncode}") from exc
    except OSError as exc:
        raise SubprocessError(f"failed to run {args[0]}: {exc}") from exc
    return result.stdout or b""


def start_server(executable: str = DEFAULT_EXECUTABLE, timeout: Optional[float] = DEFAULT_TIMEOUT) -> None:
    """Start the adb server. Idempotent on the adb side."""
    log.info("Starting adb server...")
    _run([executable, "start-server"], timeout, capture=False)
    log.info("Adb server started")


class AdbDumpSource:
    """Fetch `dumpsys` output from the connected device through adb."""

    def __init__(self, executable: str = DEFAULT_EXECUTABLE, timeout: Optional[float] = DEFAULT_TIMEOUT):
        self.executable = executable
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be > 0")
        self.timeout = timeout

    def command(self, subsystem: Subsystem) -> List[str]:
        return [self.executable, "shell", "dumpsys", subsystem.value]

    def fetch(self, subsystem: Subsystem) -> str:
        args = self.command(subsystem)
        log.debug("running %s", " ".join(args))
        raw = _run(args, self.timeout, capture=True)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SubprocessError(f"{subsystem.value} dump is not valid UTF-8") from exc
