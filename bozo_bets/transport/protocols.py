"""
Live update transports.

Two channels carry pushes between the tracker and its clients:
- TCP for FanDuel prop data, which must arrive (newline-delimited JSON
  over an asyncio stream, reconnecting with linear backoff)
- UDP for fast, loss-tolerant updates (odds, bet status, payments,
  leaderboard)

TransportManager owns one of each. A process-wide instance is available
through get_transport_manager().
"""
import asyncio
import inspect
import time
from typing import Any, Awaitable, Callable, Literal, Optional, Union

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from bozo_bets.config.settings import TransportSettings, get_settings


class TransportError(Exception):
    """Raised when a transport cannot connect or send."""

    pass


def _now_ms() -> int:
    return int(time.time() * 1000)


class FanDuelData(BaseModel):
    """Prop line pushed over the reliable channel."""

    id: str = Field(min_length=1)
    player: str = Field(min_length=1)
    team: str = Field(min_length=1)
    prop: str = Field(min_length=1)
    line: float = 0.0
    odds: int
    week: int
    season: int
    timestamp: int = Field(default_factory=_now_ms)


FastDataType = Literal["odds_update", "bet_status", "payment_update", "leaderboard_update"]
Priority = Literal["high", "medium", "low"]


class FastData(BaseModel):
    """Small update pushed over the fast channel."""

    type: FastDataType
    data: dict[str, Any]
    priority: Priority = "medium"
    timestamp: int = Field(default_factory=_now_ms)


DataCallback = Callable[[Any], Union[None, Awaitable[None]]]


async def _dispatch(callbacks: list[DataCallback], payload: Any, log) -> None:
    for callback in callbacks:
        try:
            result = callback(payload)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            log.error(f"Data callback {getattr(callback, '__name__', callback)} failed: {e}")


# =============================================================================
# TCP
# =============================================================================


class FanDuelTCPService:
    """
    Stream client for FanDuel prop data.

    Each message is one JSON object per line. When the connection drops
    the client reconnects up to ``max_reconnect_attempts`` times, waiting
    ``reconnect_backoff_seconds * attempt`` before each try.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8080,
        timeout_seconds: float = 30.0,
        max_reconnect_attempts: int = 5,
        reconnect_backoff_seconds: float = 2.0,
    ):
        self.host = host
        self.port = port
        self.timeout_seconds = timeout_seconds
        self.max_reconnect_attempts = max_reconnect_attempts
        self.reconnect_backoff_seconds = reconnect_backoff_seconds

        self.reconnect_attempts = 0
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._read_task: Optional[asyncio.Task] = None
        self._callbacks: list[DataCallback] = []
        self._closing = False
        self.logger = logger.bind(source="fanduel_tcp")

    @property
    def is_connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    def on_data(self, callback: DataCallback) -> None:
        self._callbacks.append(callback)

    async def connect(self) -> None:
        """
        Open the stream and start reading.

        Raises:
            TransportError: Connection refused or timed out
        """
        self._closing = False
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.timeout_seconds,
            )
        except (OSError, asyncio.TimeoutError) as e:
            raise TransportError(
                f"TCP connection to {self.host}:{self.port} failed: {e}"
            ) from e

        self.reconnect_attempts = 0
        self._read_task = asyncio.create_task(self._read_loop())
        self.logger.info(f"TCP connected to FanDuel service at {self.host}:{self.port}")

    async def _read_loop(self) -> None:
        reader, writer = self._reader, self._writer
        try:
            while True:
                line = await reader.readline()
                if not line:
                    break
                if not line.strip():
                    continue
                try:
                    data = FanDuelData.model_validate_json(line)
                except ValidationError as e:
                    self.logger.warning(f"Dropping malformed FanDuel message: {e}")
                    continue
                await _dispatch(self._callbacks, data, self.logger)
        except (ConnectionError, OSError) as e:
            self.logger.warning(f"TCP read failed: {e}")

        writer.close()
        if self._writer is writer:
            self._writer = None
        self.logger.info("TCP connection closed")
        if not self._closing:
            await self._reconnect()

    async def _reconnect(self) -> None:
        while self.reconnect_attempts < self.max_reconnect_attempts:
            self.reconnect_attempts += 1
            delay = self.reconnect_backoff_seconds * self.reconnect_attempts
            self.logger.info(
                f"Attempting TCP reconnection {self.reconnect_attempts}/"
                f"{self.max_reconnect_attempts} in {delay:.1f}s"
            )
            await asyncio.sleep(delay)
            if self._closing:
                return
            try:
                await self.connect()
                return
            except TransportError as e:
                self.logger.warning(str(e))

        self.logger.error("Max TCP reconnection attempts reached")

    async def send(self, data: FanDuelData) -> bool:
        """
        Write one prop message.

        Raises:
            TransportError: Not connected, or the write failed
        """
        if not self.is_connected:
            raise TransportError("TCP connection not established")

        try:
            self._writer.write(data.model_dump_json().encode() + b"\n")
            await self._writer.drain()
        except (ConnectionError, OSError) as e:
            raise TransportError(f"Error sending FanDuel data via TCP: {e}") from e

        self.logger.debug(f"FanDuel data sent via TCP: {data.id}")
        return True

    async def disconnect(self) -> None:
        self._closing = True
        if self._read_task is not None:
            self._read_task.cancel()
            try:
                await self._read_task
            except asyncio.CancelledError:
                pass
            self._read_task = None

        if self._writer is not None:
            writer, self._writer = self._writer, None
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError) as e:
                self.logger.debug(f"TCP close: {e}")


# =============================================================================
# UDP
# =============================================================================


class _FastDataProtocol(asyncio.DatagramProtocol):
    def __init__(self, service: "FastDataUDPService"):
        self.service = service

    def datagram_received(self, data: bytes, addr: tuple) -> None:
        self.service._handle_datagram(data, addr)

    def error_received(self, exc: Exception) -> None:
        self.service.logger.warning(f"UDP socket error: {exc}")


class FastDataUDPService:
    """Datagram endpoint that listens for and sends FastData messages."""

    def __init__(self, host: str = "localhost", port: int = 8081):
        self.host = host
        self.port = port
        self._transport: Optional[asyncio.DatagramTransport] = None
        self._callbacks: list[DataCallback] = []
        self._pending: set[asyncio.Task] = set()
        self.logger = logger.bind(source="fast_data_udp")

    @property
    def is_listening(self) -> bool:
        return self._transport is not None and not self._transport.is_closing()

    @property
    def local_address(self) -> Optional[tuple]:
        if self._transport is None:
            return None
        return self._transport.get_extra_info("sockname")

    def on_data(self, callback: DataCallback) -> None:
        self._callbacks.append(callback)

    async def start_listening(self) -> None:
        """
        Bind the datagram endpoint.

        Raises:
            TransportError: The address could not be bound
        """
        loop = asyncio.get_running_loop()
        try:
            self._transport, _ = await loop.create_datagram_endpoint(
                lambda: _FastDataProtocol(self),
                local_addr=(self.host, self.port),
            )
        except OSError as e:
            raise TransportError(f"UDP bind on {self.host}:{self.port} failed: {e}") from e

        self.logger.info(f"UDP listening on {self.host}:{self.port}")

    def _handle_datagram(self, raw: bytes, addr: tuple) -> None:
        try:
            data = FastData.model_validate_json(raw)
        except ValidationError as e:
            self.logger.warning(f"Dropping malformed UDP message from {addr}: {e}")
            return

        self.logger.debug(f"UDP received {data.type} from {addr[0]}:{addr[1]}")
        task = asyncio.ensure_future(_dispatch(self._callbacks, data, self.logger))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def send(
        self,
        data: FastData,
        target_host: Optional[str] = None,
        target_port: Optional[int] = None,
    ) -> bool:
        """
        Send one datagram, by default to this endpoint's own address.

        Raises:
            TransportError: Socket not open
        """
        if not self.is_listening:
            raise TransportError("UDP socket not open")

        host = target_host or self.host
        port = target_port or self.port
        self._transport.sendto(data.model_dump_json().encode(), (host, port))
        self.logger.debug(f"Fast data sent via UDP: {data.type}")
        return True

    def stop_listening(self) -> None:
        if self._transport is not None:
            self._transport.close()
            self._transport = None
        for task in list(self._pending):
            task.cancel()


# =============================================================================
# Manager
# =============================================================================


class TransportManager:
    """
    Coordinates the TCP and UDP services.

    Example:
        >>> manager = TransportManager(settings.transport)
        >>> await manager.initialize()
        >>> await manager.send_fast_data(FastData(type="bet_status", data={...}))
        True
        >>> await manager.shutdown()
    """

    def __init__(self, settings: TransportSettings):
        self.settings = settings
        self.tcp = FanDuelTCPService(
            host=settings.tcp_host,
            port=settings.tcp_port,
            timeout_seconds=settings.tcp_timeout_seconds,
            max_reconnect_attempts=settings.max_reconnect_attempts,
            reconnect_backoff_seconds=settings.reconnect_backoff_seconds,
        )
        self.udp = FastDataUDPService(host=settings.udp_host, port=settings.udp_port)
        self.is_initialized = False
        self.logger = logger.bind(source="transport")

    async def initialize(self) -> None:
        """
        Start UDP listening, then connect TCP.

        Raises:
            TransportError: Either service failed to start
        """
        if self.is_initialized:
            return

        await self.udp.start_listening()
        try:
            await self.tcp.connect()
        except TransportError:
            self.udp.stop_listening()
            raise

        self.is_initialized = True
        self.logger.info("Transport manager initialized")

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise TransportError("Transport manager not initialized")

    async def send_fanduel_data(self, data: FanDuelData) -> bool:
        self._require_initialized()
        return await self.tcp.send(data)

    async def send_fast_data(
        self,
        data: FastData,
        target_host: Optional[str] = None,
        target_port: Optional[int] = None,
    ) -> bool:
        self._require_initialized()
        return await self.udp.send(data, target_host, target_port)

    def on_fanduel_data(self, callback: DataCallback) -> None:
        self.tcp.on_data(callback)

    def on_fast_data(self, callback: DataCallback) -> None:
        self.udp.on_data(callback)

    def status(self) -> dict[str, Any]:
        return {
            "initialized": self.is_initialized,
            "tcp": {
                "host": self.tcp.host,
                "port": self.tcp.port,
                "connected": self.tcp.is_connected,
                "reconnect_attempts": self.tcp.reconnect_attempts,
                "purpose": "FanDuel data (reliable)",
            },
            "udp": {
                "host": self.udp.host,
                "port": self.udp.port,
                "listening": self.udp.is_listening,
                "purpose": "Fast data updates",
            },
        }

    async def shutdown(self) -> None:
        await self.tcp.disconnect()
        self.udp.stop_listening()
        self.is_initialized = False
        self.logger.info("Transport manager shut down")


_transport_manager: Optional[TransportManager] = None


def get_transport_manager(settings: Optional[TransportSettings] = None) -> TransportManager:
    """Process-wide manager, created on first use."""
    global _transport_manager
    if _transport_manager is None:
        settings = settings or get_settings().transport
        _transport_manager = TransportManager(settings)
    return _transport_manager


async def shutdown_transport() -> None:
    global _transport_manager
    if _transport_manager is not None:
        await _transport_manager.shutdown()
        _transport_manager = None
