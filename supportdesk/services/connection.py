"""
Connection Guard

Gates every ticket operation behind a cheap backend health check.

- Results are trusted for a freshness window (30s by default), so a burst of
  operations (dashboard load: tickets + bucket check + list) costs one probe.
- Concurrent callers of ensure_connection() share a single in-flight probe.
- Probe failures are logged and reported as False; they never raise.

All state lives in a ConnectionState created once at startup and passed to
the guard. The guard runs on one asyncio loop; only the blocking Supabase
call is pushed to a worker thread, state is mutated on the loop.
"""
import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from postgrest.exceptions import APIError

from supportdesk.models.schemas import ConnectionStatus
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

# PostgREST "JSON object requested, multiple (or no) rows returned".
# The probe query ran, the table just had nothing for .single() to return.
NO_ROWS_ERROR_CODE = "PGRST116"

DEFAULT_CHECK_INTERVAL_SECONDS = 30.0


@dataclass
class ConnectionState:
    """Process-wide connection state (one instance per application)"""
    connected: bool = False
    last_check: float = 0.0
    checked_at: Optional[datetime] = None
    in_flight: Optional["asyncio.Task[bool]"] = None


class ConnectionGuard:
    """Throttled, de-duplicated Supabase connectivity check"""

    def __init__(
        self,
        client,
        state: ConnectionState,
        check_interval: float = DEFAULT_CHECK_INTERVAL_SECONDS,
        probe_table: str = "tickets",
        probe_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            client: Supabase client
            state: Shared connection state
            check_interval: Freshness window in seconds
            probe_table: Table queried by the health probe
            probe_timeout: Optional bound on the probe in seconds (None = wait)
            clock: Monotonic clock, injectable for tests
        """
        self.client = client
        self.state = state
        self.check_interval = check_interval
        self.probe_table = probe_table
        self.probe_timeout = probe_timeout
        self._clock = clock

    def is_fresh(self) -> bool:
        """True when connected and the last success is inside the window"""
        return (
            self.state.connected
            and (self._clock() - self.state.last_check) < self.check_interval
        )

    async def check_connection(self) -> bool:
        """
        Probe the backend unless a recent success is cached.

        Returns:
            True if the backend answered, False otherwise
        """
        try:
            now = self._clock()
            if self.is_fresh():
                return True

            try:
                await self._probe()
            except APIError as e:
                if e.code != NO_ROWS_ERROR_CODE:
                    logger.error(f"Supabase connection test failed: {e.code} {e.message}")
                    self.state.connected = False
                    return False

            self.state.last_check = now
            self.state.checked_at = datetime.now(timezone.utc)
            self.state.connected = True
            return True

        except Exception as e:
            logger.error(f"Failed to connect to Supabase: {e}")
            self.state.connected = False
            return False

    async def ensure_connection(self) -> bool:
        """
        Connectivity check shared by all concurrent callers.

        The in-flight slot is set before the first suspension point, so
        callers arriving while a probe runs await that same probe.
        """
        if self.is_fresh():
            return True

        if self.state.in_flight is None:
            loop = asyncio.get_running_loop()
            self.state.in_flight = loop.create_task(self._run_shared_check())

        # Shield so one caller being cancelled does not cancel the probe for everyone
        return await asyncio.shield(self.state.in_flight)

    async def _run_shared_check(self) -> bool:
        try:
            connected = await self.check_connection()
            self.state.connected = connected
            return connected
        finally:
            self.state.in_flight = None

    async def _probe(self) -> None:
        query = self.client.table(self.probe_table).select("count").single()
        call = asyncio.to_thread(query.execute)
        if self.probe_timeout is not None:
            await asyncio.wait_for(call, timeout=self.probe_timeout)
        else:
            await call

    def status(self) -> ConnectionStatus:
        """Snapshot for the health endpoint"""
        return ConnectionStatus(
            connected=self.state.connected,
            last_check=self.state.checked_at,
            check_in_flight=self.state.in_flight is not None
        )
