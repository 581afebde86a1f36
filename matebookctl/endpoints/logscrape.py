"""macOS endpoint that reads thresholds from the ACPIDebug kext log output.

There is no readable attribute on macOS, so reading means: start a
``log stream`` filtered on the debug kext, ask the kext to dump the embedded
controller registers via ``ioio``, give the log a moment to flush, then scrape
the dump from the captured stream.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
import threading
import time
from collections.abc import Callable, Sequence

from matebookctl.core.codec import encode_pair_argument, parse_log_fragment
from matebookctl.core.errors import EndpointError, ReadError, WriteError
from matebookctl.core.model import OFF_PAIR, ThresholdPair

LOGGER = logging.getLogger(__name__)


class IoioWriter:
    """Writes thresholds by calling ACPIDebug methods through ``ioio``."""

    def __init__(self, off_command: Sequence[str], set_command: Sequence[str]) -> None:
        self.off_command = tuple(off_command)
        self.set_command = tuple(set_command)

    def write(self, pair: ThresholdPair) -> None:
        if pair.normalized() == OFF_PAIR:
            LOGGER.debug("Using ioio to switch battery protection off...")
            cmd = list(self.off_command)
        else:
            LOGGER.debug("Using ioio to set battery thresholds to %d-%d", pair.min, pair.max)
            cmd = [*self.set_command, encode_pair_argument(pair.min, pair.max)]

        try:
            result = subprocess.run(cmd, check=False, capture_output=True, text=True)
        except FileNotFoundError as exc:
            raise WriteError(f"Failed to run {cmd[0]!r}. Is the binary not in PATH?") from exc
        if result.returncode != 0:
            raise WriteError(f"{' '.join(cmd)} -> exit status {result.returncode}")


class LogScrapeEndpoint:
    def __init__(
        self,
        stream_command: Sequence[str],
        trigger_command: Sequence[str],
        *,
        writer: IoioWriter | None = None,
        stream_settle_s: float = 0.2,
        dump_settle_s: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.stream_command = tuple(stream_command)
        self.trigger_command = tuple(trigger_command)
        self.writer = writer
        self.stream_settle_s = stream_settle_s
        self.dump_settle_s = dump_settle_s
        self._sleep = sleep
        self._lock = threading.Lock()
        self._stream: subprocess.Popen[str] | None = None

    def get(self) -> ThresholdPair:
        with tempfile.TemporaryFile(mode="w+", encoding="utf-8") as captured:
            try:
                stream = subprocess.Popen(
                    list(self.stream_command),
                    stdout=captured,
                    stderr=subprocess.DEVNULL,
                    text=True,
                )
            except OSError as exc:
                LOGGER.error('Failed to run the "log" command. Is "log" binary not in PATH?')
                raise ReadError(f"Could not start {self.stream_command[0]!r}: {exc}") from exc

            with self._lock:
                self._stream = stream
            try:
                self._sleep(self.stream_settle_s)
                self._trigger_dump()
                self._sleep(self.dump_settle_s)
            finally:
                self._kill_stream()

            captured.seek(0)
            output = captured.read()

        LOGGER.debug("Read from the log: %s", output)
        return parse_log_fragment(output)

    def _trigger_dump(self) -> None:
        cmd = list(self.trigger_command)
        try:
            result = subprocess.run(cmd, check=False, capture_output=True, text=True)
        except FileNotFoundError as exc:
            LOGGER.error('Failed to run the "ioio" command. Is the binary not in PATH?')
            raise ReadError(f"Could not run {cmd[0]!r}") from exc
        if result.returncode != 0:
            raise ReadError(f"{' '.join(cmd)} -> exit status {result.returncode}")

    def _kill_stream(self) -> None:
        with self._lock:
            stream, self._stream = self._stream, None
        if stream is None:
            return
        LOGGER.debug("Killing the log output process...")
        stream.kill()
        stream.wait()

    def set(self, pair: ThresholdPair) -> None:
        if self.writer is None:
            raise WriteError("Setting thresholds is not implemented for this interface")
        self.writer.write(pair)

    def is_writable(self) -> bool:
        """Read the thresholds and write them back unchanged.

        Performs one real write when a writer is configured.
        """
        try:
            self.set(self.get())
        except EndpointError as exc:
            LOGGER.debug("%s", exc)
            return False
        return True

    def close(self) -> None:
        self._kill_stream()

    def describe(self) -> str:
        return f"log scrape via {' '.join(self.trigger_command)}"
