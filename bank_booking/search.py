"""Availability search with caching and debouncing.

The controller turns (date, time) selections into slot lists for a
presentation layer. Fresh cached lookups are served synchronously;
everything else is debounced on the running asyncio loop so a burst of
selections produces a single backend call.

Every search call takes a new sequence number. A lookup that completes
after a newer search still fills the cache, but it never overwrites the
state the newer search produced.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Set, Tuple

from bank_booking import config
from bank_booking.api.models import SearchAvailabilityRequest, TimeSlot
from bank_booking.api_client import BookingApiClient, BookingApiError
from bank_booking.cache import AvailabilityCache, make_cache_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchState:
    """What the presentation layer renders: slots, spinner, error line."""
    slots: Tuple[TimeSlot, ...] = ()
    is_loading: bool = False
    error: str = ""


class SearchAvailabilityController:
    """
    Owns one availability cache and at most one pending debounced lookup.

    Must be used from a running event loop. Call cleanup() when the owner
    goes away so a pending lookup cannot fire afterwards.
    """

    def __init__(
        self,
        api_client: BookingApiClient,
        cache: Optional[AvailabilityCache] = None,
        debounce_delay: float = config.DEBOUNCE_DELAY_SECONDS,
        service_type: str = config.DEFAULT_SERVICE_TYPE,
        duration: int = config.DEFAULT_DURATION_MINUTES,
        on_change: Optional[Callable[[SearchState], None]] = None
    ):
        """
        Args:
            api_client: Backend client; its blocking search runs in a worker thread
            cache: Lookup cache (default: fresh AvailabilityCache)
            debounce_delay: Quiet period in seconds before a lookup fires
            service_type: Service type sent with every lookup
            duration: Appointment length in minutes sent with every lookup
            on_change: Called with the new state after every state change
        """
        self.api_client = api_client
        self.cache = cache if cache is not None else AvailabilityCache()
        self.debounce_delay = debounce_delay
        self.service_type = service_type
        self.duration = duration
        self.on_change = on_change

        self._state = SearchState()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._in_flight: Set[asyncio.Task] = set()
        self._sequence = 0

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def slots(self) -> Tuple[TimeSlot, ...]:
        return self._state.slots

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def error(self) -> str:
        return self._state.error

    @property
    def has_pending_lookup(self) -> bool:
        return self._timer is not None

    def _set_state(self, state: SearchState):
        self._state = state
        if self.on_change is not None:
            self.on_change(state)

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def search(self, date: str, time: str):
        """
        Look up slots for a date (YYYY-MM-DD) and time (HH:mm).

        No-op when either value is empty. A fresh cache entry updates the
        state immediately; otherwise the state switches to loading and a
        lookup is scheduled after the debounce delay, replacing any lookup
        still waiting to fire.
        """
        if not date or not time:
            return

        self._sequence += 1
        sequence = self._sequence
        cache_key = make_cache_key(date, time)

        cached_slots = self.cache.get(cache_key)
        if cached_slots is not None:
            logger.debug("Cache hit for %s", cache_key)
            self._set_state(SearchState(slots=cached_slots))
            return

        self._cancel_timer()
        self._set_state(SearchState(slots=self._state.slots, is_loading=True))

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(
            self.debounce_delay, self._fire, cache_key, date, time, sequence
        )

    def _fire(self, cache_key: str, date: str, time: str, sequence: int):
        self._timer = None
        task = asyncio.get_running_loop().create_task(
            self._lookup(cache_key, date, time, sequence)
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _lookup(self, cache_key: str, date: str, time: str, sequence: int):
        request = SearchAvailabilityRequest(
            date=date,
            time=time,
            service_type=self.service_type,
            duration=self.duration
        )
        logger.info(f"Searching availability for {date} {time}")

        try:
            response = await asyncio.to_thread(self.api_client.search_availability, request)
        except BookingApiError as e:
            logger.warning(f"Availability lookup failed ({e.code}): {e.message}")
            self._apply(sequence, SearchState(error=config.NETWORK_ERROR_MESSAGE))
            return
        except Exception as e:
            logger.error(f"Unexpected error during availability lookup: {e}", exc_info=True)
            self._apply(sequence, SearchState(error=config.NETWORK_ERROR_MESSAGE))
            return

        if response.success and response.data is not None:
            slots = tuple(response.data.slots)
            self.cache.set(cache_key, slots)
            self._apply(sequence, SearchState(slots=slots))
        else:
            message = ""
            if response.error is not None:
                message = response.error.message
            self._apply(sequence, SearchState(error=message or config.SEARCH_FAILED_MESSAGE))

    def _apply(self, sequence: int, state: SearchState):
        if sequence != self._sequence:
            logger.debug(
                "Ignoring lookup result %d, superseded by search %d", sequence, self._sequence
            )
            return
        self._set_state(state)

    def clear_results(self):
        """Reset to no slots, not loading, no error. Cache and pending lookup are untouched."""
        self._set_state(SearchState())

    def cleanup(self):
        """Cancel the pending debounced lookup, if any, without touching state."""
        self._cancel_timer()

    async def wait_until_settled(self, poll_interval: float = 0.01):
        """Wait until no lookup is pending or in flight."""
        while self._timer is not None or self._in_flight:
            if self._in_flight:
                await asyncio.gather(*list(self._in_flight), return_exceptions=True)
            else:
                await asyncio.sleep(poll_interval)
