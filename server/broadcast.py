"""
Server-sent events (SSE) broadcasting module.

This module handles real-time updates via Server-Sent Events, managing
subscriber connections, broadcasting new hazards to every client and
delivering proximity alerts and toasts to a single client.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-14
"""

import asyncio
import json
from datetime import datetime
from typing import Dict, Optional, Set

# Global set of SSE subscribers (asyncio.Queue instances)
subscribers: Set[asyncio.Queue] = set()

# Subscribers grouped by client ID, for targeted events
client_subscribers: Dict[str, Set[asyncio.Queue]] = {}


def subscribe(client_id: Optional[str] = None) -> asyncio.Queue:
    """Register a new SSE subscriber queue.

    Args:
        client_id: Optional client ID used for targeted events.

    Returns:
        The queue events will be delivered to.
    """
    queue: asyncio.Queue = asyncio.Queue()
    subscribers.add(queue)
    if client_id:
        client_subscribers.setdefault(client_id, set()).add(queue)
    return queue


def unsubscribe(queue: asyncio.Queue, client_id: Optional[str] = None) -> None:
    subscribers.discard(queue)
    if client_id and client_id in client_subscribers:
        client_subscribers[client_id].discard(queue)
        if not client_subscribers[client_id]:
            del client_subscribers[client_id]


async def event_generator(queue: asyncio.Queue, client_id: Optional[str] = None):
    """Generate SSE events from the queue.

    Args:
        queue: Async queue to read events from.
        client_id: Client the queue was registered for.

    Yields:
        SSE formatted event strings.
    """
    try:
        while True:
            data = await queue.get()
            yield f"data: {json.dumps(data, default=str)}\n\n"
    except asyncio.CancelledError:
        pass
    finally:
        unsubscribe(queue, client_id)


def _stamp(payload: dict) -> dict:
    return {**payload, "time": datetime.now().strftime("%Y-%m-%d %H:%M:%S")}


async def broadcast(payload: dict) -> int:
    """Send an event to every subscriber.

    Returns:
        Number of queues the event was delivered to.
    """
    payload = _stamp(payload)
    queues = list(subscribers)
    for queue in queues:
        await queue.put(payload)
    return len(queues)


async def send_to_client(client_id: str, payload: dict) -> int:
    """Send an event to one client's subscribers.

    Returns:
        Number of queues the event was delivered to.
    """
    payload = _stamp(payload)
    queues = list(client_subscribers.get(client_id, ()))
    for queue in queues:
        await queue.put(payload)
    return len(queues)


async def notify_hazard_added(hazard: dict) -> None:
    """Tell every client a hazard was added so maps can draw its marker."""
    await broadcast({"type": "hazard_added", "hazard": hazard})


async def notify_proximity_alert(client_id: str, alert: dict) -> None:
    await send_to_client(client_id, alert)


async def toast(client_id: str, message: str, level: str = "info") -> None:
    """Show a transient notification on one client."""
    await send_to_client(client_id, {"type": "toast", "level": level, "message": message})
