"""
Fire-and-forget helpers for pushing updates over UDP.

Every helper returns False instead of raising when the transport is not
running or the send fails.
"""
from typing import Any, Optional

from loguru import logger

from .protocols import FastData, TransportError, TransportManager, get_transport_manager

log = logger.bind(source="fast_data")


async def _send(
    kind: str,
    data: dict[str, Any],
    priority: str,
    manager: Optional[TransportManager],
) -> bool:
    manager = manager or get_transport_manager()
    try:
        await manager.send_fast_data(FastData(type=kind, data=data, priority=priority))
    except TransportError as e:
        log.warning(f"Error sending {kind} via UDP: {e}")
        return False
    return True


async def send_odds_update(
    bet_id: int,
    new_odds: int,
    confidence: float = 1.0,
    manager: Optional[TransportManager] = None,
) -> bool:
    return await _send(
        "odds_update",
        {"bet_id": bet_id, "new_odds": new_odds, "confidence": confidence},
        "high",
        manager,
    )


async def send_bet_status_update(
    bet_id: int,
    user_id: int,
    status: str,
    manager: Optional[TransportManager] = None,
) -> bool:
    return await _send(
        "bet_status",
        {"bet_id": bet_id, "user_id": user_id, "status": status},
        "high",
        manager,
    )


async def send_payment_update(
    bet_id: int,
    user_id: int,
    paid: bool,
    manager: Optional[TransportManager] = None,
) -> bool:
    return await _send(
        "payment_update",
        {"bet_id": bet_id, "user_id": user_id, "paid": paid},
        "medium",
        manager,
    )


async def send_leaderboard_update(
    user_id: int,
    total_bozos: int,
    total_hits: int,
    total_fav_misses: int = 0,
    manager: Optional[TransportManager] = None,
) -> bool:
    return await _send(
        "leaderboard_update",
        {
            "user_id": user_id,
            "total_bozos": total_bozos,
            "total_hits": total_hits,
            "total_fav_misses": total_fav_misses,
        },
        "medium",
        manager,
    )


async def send_batch_updates(
    updates: list[FastData], manager: Optional[TransportManager] = None
) -> list[bool]:
    """Send several updates; one result per update."""
    manager = manager or get_transport_manager()
    results = []
    for update in updates:
        try:
            results.append(await manager.send_fast_data(update))
        except TransportError as e:
            log.warning(f"Error sending batch update {update.type}: {e}")
            results.append(False)
    return results
