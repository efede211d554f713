import asyncio

import pytest

from bozo_bets.config.settings import TransportSettings
from bozo_bets.transport import (
    FanDuelData,
    FastData,
    FastDataUDPService,
    TransportError,
    TransportManager,
    send_batch_updates,
    send_bet_status_update,
    send_payment_update,
    shutdown_transport,
)

LOCALHOST = "127.0.0.1"


def make_manager(tcp_port: int) -> TransportManager:
    return TransportManager(
        TransportSettings(
            tcp_host=LOCALHOST,
            tcp_port=tcp_port,
            tcp_timeout_seconds=2.0,
            udp_host=LOCALHOST,
            udp_port=0,
            max_reconnect_attempts=0,
        )
    )


async def _echo(reader, writer):
    while True:
        line = await reader.readline()
        if not line:
            break
        writer.write(line)
        await writer.drain()
    writer.close()


def test_send_before_initialize():
    manager = make_manager(8080)

    with pytest.raises(TransportError, match="not initialized"):
        asyncio.run(manager.send_fast_data(FastData(type="bet_status", data={})))


def test_fast_data_helpers_report_failure():
    manager = make_manager(8080)

    async def run():
        return (
            await send_bet_status_update(1, 2, "HIT", manager=manager),
            await send_payment_update(1, 2, True, manager=manager),
            await send_batch_updates(
                [FastData(type="odds_update", data={"bet_id": 1})], manager=manager
            ),
        )

    assert asyncio.run(run()) == (False, False, [False])


def test_fast_data_rejects_unknown_type():
    with pytest.raises(ValueError):
        FastData(type="chat", data={})


def test_round_trip_over_tcp_and_udp():
    async def run():
        server = await asyncio.start_server(_echo, LOCALHOST, 0)
        port = server.sockets[0].getsockname()[1]
        manager = make_manager(port)

        props = asyncio.Queue()
        updates = asyncio.Queue()
        manager.on_fanduel_data(props.put_nowait)
        manager.on_fast_data(updates.put)

        await manager.initialize()
        try:
            status = manager.status()
            await manager.send_fanduel_data(
                FanDuelData(
                    id="fd-1",
                    player="Josh Allen",
                    team="Bills",
                    prop="Passing Yards",
                    line=250.5,
                    odds=-110,
                    week=2,
                    season=2025,
                )
            )
            _, udp_port = manager.udp.local_address[:2]
            await manager.send_fast_data(
                FastData(type="bet_status", data={"bet_id": 7}, priority="high"),
                target_port=udp_port,
            )

            prop = await asyncio.wait_for(props.get(), timeout=2)
            update = await asyncio.wait_for(updates.get(), timeout=2)
        finally:
            await manager.shutdown()
            server.close()
            await server.wait_closed()

        return status, prop, update

    status, prop, update = asyncio.run(run())

    assert status["initialized"] is True
    assert status["tcp"]["connected"] is True
    assert status["udp"]["listening"] is True
    assert (prop.id, prop.line) == ("fd-1", 250.5)
    assert update.type == "bet_status"
    assert update.data == {"bet_id": 7}


def test_initialize_fails_without_tcp_server():
    async def run():
        server = await asyncio.start_server(_echo, LOCALHOST, 0)
        port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()

        manager = make_manager(port)
        with pytest.raises(TransportError):
            await manager.initialize()
        return manager

    manager = asyncio.run(run())

    assert manager.is_initialized is False
    assert manager.udp.is_listening is False


def test_malformed_datagram_is_dropped():
    service = FastDataUDPService(host=LOCALHOST, port=0)
    received = []
    service.on_data(received.append)

    service._handle_datagram(b"not json", (LOCALHOST, 9999))

    assert received == []


def test_status_endpoint_without_transport(client):
    body = client.get("/api/transport/status").json()
    asyncio.run(shutdown_transport())

    assert body["initialized"] is False
    assert body["udp"]["purpose"] == "Fast data updates"


def test_push_requires_initialized_transport(client):
    response = client.post(
        "/api/transport/fast-data", json={"type": "odds_update", "data": {"bet_id": 1}}
    )

    assert response.status_code == 503
    assert response.json()["detail"] == "Transport not initialized"
