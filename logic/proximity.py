"""
Proximity alerting.

This module turns nearby hazards into transient alert payloads and runs the
per-client polling loop that re-checks a user's last known location against
every loaded hazard on a fixed interval.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-14
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Set, Tuple

from logic.config import ALERT_RADIUS_KM, PROXIMITY_INTERVAL_SECONDS
from logic.geo import find_nearby_hazards
from logic.validation import HAZARD_TYPES

log = logging.getLogger(__name__)

HazardLoader = Callable[[], List[Dict]]
AlertNotifier = Callable[[str, Dict], Awaitable[None]]
ErrorNotifier = Callable[[str, str], Awaitable[None]]


def build_alert(hazard: Dict, distance_km: float) -> Dict:
    """Build the notification payload for one nearby hazard.

    Args:
        hazard: Hazard document.
        distance_km: Distance from the user in kilometres.

    Returns:
        Alert dictionary ready to be sent to the client.
    """
    label = HAZARD_TYPES.get(hazard.get("type"), "Hazard")
    metres = int(round(distance_km * 1000))
    return {
        "type": "proximity_alert",
        "hazard_id": hazard.get("id"),
        "hazard_type": hazard.get("type"),
        "severity": hazard.get("severity"),
        "location": hazard.get("location"),
        "distance_km": distance_km,
        "distance_m": metres,
        "message": f"Warning: {label} nearby ({metres} m)",
    }


def check_proximity(
        lat: float, lng: float, hazards: List[Dict], radius_km: float = ALERT_RADIUS_KM
) -> List[Dict]:
    """Run one proximity scan.

    Returns:
        One alert per hazard strictly inside the radius, nearest first.
    """
    return [
        build_alert(hazard, distance)
        for hazard, distance in find_nearby_hazards(lat, lng, hazards, radius_km)
    ]


class ProximityMonitor:
    """Fixed-interval proximity scanning for each watching client.

    Every client with a known location gets its own asyncio task that sleeps
    for ``interval`` seconds and then scans all hazards. Hazards are loaded in
    a worker thread, and a failed scan is logged and reported to the client
    without ending its task. Updating the
    location or the hazard list restarts the task, so the first scan after a
    change happens one full interval later.

    Attributes:
        locations: Last known (lat, lng) per client ID.
        interval: Seconds between scans.
        radius_km: Alert radius in kilometres.
        repeat_alerts: When False a hazard alerts once per approach and again
            only after the client has left its radius.
        on_error: Called with (client_id, message) when a scan fails.
    """

    def __init__(
        self,
        load_hazards: HazardLoader,
        notify: AlertNotifier,
        interval: float = PROXIMITY_INTERVAL_SECONDS,
        radius_km: float = ALERT_RADIUS_KM,
        repeat_alerts: bool = False,
        on_error: Optional[ErrorNotifier] = None,
    ):
        self.load_hazards = load_hazards
        self.notify = notify
        self.on_error = on_error
        self.interval = interval
        self.radius_km = radius_km
        self.repeat_alerts = repeat_alerts
        self.locations: Dict[str, Tuple[float, float]] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._alerted: Dict[str, Set[str]] = {}

    def is_watching(self, client_id: str) -> bool:
        task = self._tasks.get(client_id)
        return task is not None and not task.done()

    @property
    def watching(self) -> List[str]:
        return [client_id for client_id in self._tasks if self.is_watching(client_id)]

    def update_location(self, client_id: str, lat: float, lng: float) -> None:
        """Record a client's position and restart its polling interval.

        Must be called from a running event loop.
        """
        self.locations[client_id] = (lat, lng)
        self._restart(client_id)

    def stop(self, client_id: str) -> bool:
        """Stop watching a client.

        Returns:
            True if the client was being watched.
        """
        was_watching = self.is_watching(client_id)
        self._cancel(client_id)
        self.locations.pop(client_id, None)
        self._alerted.pop(client_id, None)
        return was_watching

    def refresh(self) -> None:
        """Restart every running watcher after the hazard list changed."""
        for client_id in list(self._tasks):
            self._restart(client_id)

    async def tick(self, client_id: str) -> List[Dict]:
        """Scan hazards for one client and send any alerts.

        Args:
            client_id: Client to check.

        Returns:
            Alerts that were sent on this tick.
        """
        location = self.locations.get(client_id)
        if location is None:
            return []

        try:
            hazards = await asyncio.to_thread(self.load_hazards)
        except Exception:
            log.exception("Error loading hazards for proximity check (client %s)", client_id)
            await self._report_error(client_id)
            return []

        alerts = check_proximity(location[0], location[1], hazards, self.radius_km)

        if not self.repeat_alerts:
            previous = self._alerted.get(client_id, set())
            self._alerted[client_id] = {a["hazard_id"] for a in alerts}
            alerts = [a for a in alerts if a["hazard_id"] not in previous]

        for alert in alerts:
            log.info("Proximity alert for %s: %s", client_id, alert["message"])
            await self.notify(client_id, alert)

        return alerts

    async def shutdown(self) -> None:
        """Cancel every watcher and wait for the tasks to finish."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, client_id: str) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.tick(client_id)
            except Exception:
                log.exception("Proximity check failed for client %s", client_id)
                await self._report_error(client_id)

    async def _report_error(self, client_id: str) -> None:
        if self.on_error is None:
            return
        try:
            await self.on_error(client_id, "Could not check for nearby hazards")
        except Exception:
            log.exception("Could not notify client %s of a failed check", client_id)

    def _restart(self, client_id: str) -> None:
        self._cancel(client_id)
        loop = asyncio.get_running_loop()
        self._tasks[client_id] = loop.create_task(self._run(client_id))

    def _cancel(self, client_id: str) -> Optional[asyncio.Task]:
        task = self._tasks.pop(client_id, None)
        if task is not None:
            task.cancel()
        return task
