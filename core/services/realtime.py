"""
Room naming and broadcast helper for the queue socket.

Rooms are channel-layer groups scoped to one hospital so that dashboards
of different tenants never see each other's events.  Every socket of a
hospital is in the hospital group; role dashboards additionally join one
of the role rooms.
"""
import logging
from typing import Iterable, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

DOCTORS = 'doctors'
RECEPTION = 'reception'
PHARMACY = 'pharmacy'
LAB = 'lab'

# role sent with "join" -> room
ROLE_ROOMS = {
    'doctor': DOCTORS,
    'doctors': DOCTORS,
    'reception': RECEPTION,
    'pharmacy': PHARMACY,
    'lab': LAB,
}


def hospital_group(hospital_id) -> str:
    return f"hospital-{hospital_id}"


def room_group(hospital_id, room: str) -> str:
    return f"hospital-{hospital_id}.{room}"


def broadcast(hospital_id, event: str, data: dict, rooms: Optional[Iterable[str]] = None) -> None:
    """Send ``event`` to the given rooms, or hospital-wide when ``rooms`` is None.

    ``data`` must be plain JSON types; it goes through the channel layer
    as is.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    groups = [room_group(hospital_id, r) for r in rooms] if rooms is not None else [hospital_group(hospital_id)]
    message = {"type": "queue.event", "event": event, "data": data}
    for group in groups:
        async_to_sync(channel_layer.group_send)(group, message)
    logger.debug("broadcast %s to %s", event, groups)
