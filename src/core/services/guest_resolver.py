"""Guest availability resolution.

Decides whether a distribution can be exported: present and `Stopped`.
When the operator allows it, a running guest is terminated and the registry
is re-read until the host tool reports it stopped, with a bounded number of
attempts and a growing delay between them.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from adapters.wsl_client import WslClient
from core.config import AppSettings
from core.domain.errors import GuestBusyError, GuestNotFoundError, StopTimeoutError
from core.domain.models import GuestListing, GuestState

logger = logging.getLogger(__name__)


class GuestResolver:
    def __init__(
        self,
        client: WslClient,
        settings: AppSettings | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._settings = settings or AppSettings()
        self._sleep = sleep

    def _read(self) -> GuestListing:
        listing = self._client.list_guests()
        for problem in listing.parse_errors:
            logger.warning(
                "Skipping unparseable registry line %d (%s): %r",
                problem.line_number,
                problem.reason,
                problem.line,
            )
        return listing

    def resolve(self, target: str, *, force_stop: bool = False) -> bool:
        """Return True when `target` is listed and stopped, False when absent.

        Raises `GuestBusyError` for a running guest without `force_stop`, and
        `StopTimeoutError` when terminating never shows up in the listing.
        """

        attempts = 0
        while True:
            record = self._read().find(target)
            if record is None:
                return False
            if record.state is GuestState.STOPPED:
                return True
            if not force_stop:
                raise GuestBusyError(record.name)
            if attempts >= self._settings.stop_max_attempts:
                raise StopTimeoutError(record.name, attempts)

            logger.info(
                "Found %s distro but it is %s, terminating it as requested...",
                record.name,
                record.state.value.lower(),
            )
            self._client.terminate(record.name)
            delay = self._settings.stop_delay(attempts)
            attempts += 1
            if delay > 0:
                logger.debug("Waiting %.1fs before re-reading the registry", delay)
                self._sleep(delay)

    def ensure_stopped(self, target: str) -> None:
        """Re-check right before export; never terminates."""

        record = self._read().find(target)
        if record is None:
            raise GuestNotFoundError(target, self._client.list_command)
        if record.state is not GuestState.STOPPED:
            raise GuestBusyError(record.name)
