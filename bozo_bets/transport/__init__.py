"""
TCP/UDP transport for live updates.

Example:
    >>> from bozo_bets.transport import get_transport_manager
    >>>
    >>> manager = get_transport_manager(settings.transport)
    >>> await manager.initialize()
    >>> manager.status()["udp"]["listening"]
    True
"""

from .fast_data import (
    send_batch_updates,
    send_bet_status_update,
    send_leaderboard_update,
    send_odds_update,
    send_payment_update,
)
from .protocols import (
    FanDuelData,
    FanDuelTCPService,
    FastData,
    FastDataUDPService,
    TransportError,
    TransportManager,
    get_transport_manager,
    shutdown_transport,
)

__all__ = [
    "FanDuelData",
    "FanDuelTCPService",
    "FastData",
    "FastDataUDPService",
    "TransportError",
    "TransportManager",
    "get_transport_manager",
    "send_batch_updates",
    "send_bet_status_update",
    "send_leaderboard_update",
    "send_odds_update",
    "send_payment_update",
    "shutdown_transport",
]
