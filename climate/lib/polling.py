"""Generic async polling service abstraction.

Provides a reusable base class for polling services that follow the
poll → audit → persist pattern with configurable intervals. A service can
run as its own process (run()) or as a background task inside another
event loop (start()/stop()).
"""
import asyncio
import signal
from abc import ABC, abstractmethod

from climate.lib.config import get_settings
from climate.logging import get_logger


class PollingService[T](ABC):
    """Abstract base class for async polling services.

    Implements the common polling loop pattern with:
    - Configurable polling frequency
    - Graceful shutdown handling
    - Error recovery: a failed cycle never stops the loop
    """

    def __init__(
        self,
        name: str,
        frequency_sec: int | None = None,
    ) -> None:
        """Initialize the polling service.

        Args:
            name: Service name for logging.
            frequency_sec: Polling frequency in seconds.
        """
        self.name = name
        polling_cfg = get_settings().polling
        self.frequency_sec = frequency_sec or polling_cfg.frequency_sec
        self._shutdown_requested = False
        self._task: asyncio.Task[None] | None = None
        self._wakeup: asyncio.Event | None = None
        self._logger = get_logger(f"polling.{name}")

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize any resources needed before polling starts.

        Called once at the start of the loop.
        """

    @abstractmethod
    async def cleanup(self) -> None:
        """Clean up resources before exit.

        Called once when the polling loop exits.
        """

    @abstractmethod
    async def poll(self) -> T | None:
        """Poll the source for a new reading.

        Returns:
            A reading object, or None if the reading failed and should be skipped.
        """

    @abstractmethod
    async def audit(self, reading: T) -> bool:
        """Audit the reading.

        Returns:
            True if the reading is valid and should be persisted, False to skip.
        """

    @abstractmethod
    async def persist(self, reading: T) -> None:
        """Persist the reading."""

    @property
    def is_running(self) -> bool:
        """Whether the background task started by start() is alive."""
        return self._task is not None and not self._task.done()

    def on_poll_error(self, error: Exception) -> None:
        """Handle an error that occurred during a cycle.

        Override to customize error handling. Default logs the error.
        """
        self._logger.error("%s poll error: %s", self.name, error)

    def request_shutdown(self, signum: int | None = None) -> None:
        """Ask the loop to exit after the current cycle."""
        if signum is not None:
            self._logger.info(
                "Received %s, initiating graceful shutdown...",
                signal.Signals(signum).name,
            )
        self._shutdown_requested = True
        if self._wakeup is not None:
            self._wakeup.set()

    async def _poll_cycle(self) -> None:
        """Execute a single poll → audit → persist cycle."""
        reading = await self.poll()
        if reading is not None:
            if await self.audit(reading):
                await self.persist(reading)

    async def run_once(self) -> None:
        """Run one cycle, handing any failure to on_poll_error()."""
        try:
            await self._poll_cycle()
        except Exception as e:
            self.on_poll_error(e)

    async def _sleep(self, seconds: float) -> None:
        """Sleep until the next tick or until shutdown is requested."""
        assert self._wakeup is not None
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=seconds)
        except TimeoutError:
            pass

    async def _run_loop(self) -> None:
        """Run the async polling loop with precise timing."""
        self._wakeup = asyncio.Event()
        await self.initialize()
        self._logger.info(
            "%s polling service started (every %ds)", self.name, self.frequency_sec
        )

        loop = asyncio.get_running_loop()

        try:
            while not self._shutdown_requested:
                cycle_start = loop.time()

                await self.run_once()

                # Sleep only the remaining time to maintain consistent intervals
                elapsed = loop.time() - cycle_start
                sleep_time = max(0, self.frequency_sec - elapsed)
                if sleep_time > 0 and not self._shutdown_requested:
                    await self._sleep(sleep_time)
        finally:
            self._logger.info("Cleaning up resources...")
            await self.cleanup()
            self._wakeup = None
            self._logger.info("%s shutdown complete", self.name)

    def start(self) -> asyncio.Task[None]:
        """Start the polling loop as a background task of the running loop.

        Idempotent: while a task is alive, calling start() again returns it
        instead of creating a second one.
        """
        if self._task is not None and not self._task.done():
            self._logger.debug("%s polling already running", self.name)
            return self._task
        self._shutdown_requested = False
        self._task = asyncio.create_task(self._run_loop(), name=f"poll-{self.name}")
        return self._task

    async def stop(self) -> None:
        """Stop the background task started by start().

        A cycle in progress is allowed to finish; the wait between cycles
        is cut short.
        """
        task, self._task = self._task, None
        if task is None:
            return
        self.request_shutdown()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            self._logger.exception("%s polling task failed", self.name)

    async def _run_foreground(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self.request_shutdown, sig)
        await self._run_loop()

    def run(self) -> None:
        """Run the polling loop in the foreground.

        This is the main entry point for a standalone process. It:
        1. Sets up signal handlers for graceful shutdown
        2. Calls initialize()
        3. Enters the polling loop (poll → audit → persist)
        4. Calls cleanup() on exit
        """
        asyncio.run(self._run_foreground())
