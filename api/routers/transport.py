"""Live-update transport endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_app_state
from api.state import AppState
from bozo_bets.transport import FanDuelData, FastData, TransportError, get_transport_manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/transport/initialize")
async def initialize_transport(state: AppState = Depends(get_app_state)) -> dict[str, Any]:
    """Start the UDP listener and the TCP connection."""
    if not await state.initialize_transport():
        raise HTTPException(status_code=503, detail="Failed to initialize transport")
    return {
        "success": True,
        "message": "Transport initialized",
        "status": state.transport.status(),
    }


@router.get("/transport/status")
async def transport_status(state: AppState = Depends(get_app_state)) -> dict[str, Any]:
    manager = state.transport or get_transport_manager(state.settings.transport)
    return manager.status()


@router.post("/transport/fast-data")
async def push_fast_data(
    body: FastData, state: AppState = Depends(get_app_state)
) -> dict[str, Any]:
    """Send one update over UDP."""
    if state.transport is None:
        raise HTTPException(status_code=503, detail="Transport not initialized")

    try:
        sent = await state.transport.send_fast_data(body)
    except TransportError as e:
        logger.warning(f"Fast data send failed: {e}")
        raise HTTPException(status_code=503, detail=str(e))

    return {"success": sent, "type": body.type, "priority": body.priority}


@router.post("/transport/fanduel-tcp")
async def push_fanduel_data(
    body: FanDuelData, state: AppState = Depends(get_app_state)
) -> dict[str, Any]:
    """Send one prop line over TCP."""
    if state.transport is None:
        raise HTTPException(status_code=503, detail="Transport not initialized")

    try:
        sent = await state.transport.send_fanduel_data(body)
    except TransportError as e:
        logger.warning(f"FanDuel data send failed: {e}")
        raise HTTPException(status_code=503, detail=str(e))

    return {"success": sent, "id": body.id}
