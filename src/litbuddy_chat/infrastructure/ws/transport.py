"""Single persistent broker connection with fixed-delay reconnect."""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Protocol

import websockets
from pydantic import ValidationError

from litbuddy_chat.application.exceptions import NotConnectedError
from litbuddy_chat.application.ports.clock import Clock, SystemClock
from litbuddy_chat.config import Settings, settings as default_settings
from litbuddy_chat.domain.value_objects.enums import ConnectionState, FrameCommand
from litbuddy_chat.infrastructure.auth.token_claims import token_expired
from litbuddy_chat.infrastructure.ws.protocol import (
    StompFrame,
    connect_frame,
    disconnect_frame,
    send_frame,
)

logger = logging.getLogger(__name__)

CLOSE_FLUSH_TIMEOUT_SECONDS = 1.0


class Socket(Protocol):
    async def send(self, message: str) -> None: ...

    async def recv(self) -> str | bytes: ...

    async def close(self) -> None: ...


SocketFactory = Callable[[str], Awaitable[Socket]]
OnFrameCallback = Callable[[StompFrame], None]
OnConnectedCallback = Callable[[], None]


class StompTransport:
    """Owns the socket; exposes connect / publish / is_ready."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        socket_factory: SocketFactory | None = None,
        clock: Clock | None = None,
        on_message: OnFrameCallback | None = None,
        on_connected: OnConnectedCallback | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self._socket_factory: SocketFactory = socket_factory or websockets.connect
        self._clock = clock or SystemClock()
        self._on_message = on_message
        self._on_connected = on_connected

        self._token: str | None = None
        self._socket: Socket | None = None
        self._state = ConnectionState.DISCONNECTED
        self._ready = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._writes: asyncio.Queue[StompFrame] = asyncio.Queue()
        self._offline: deque[StompFrame] = deque(maxlen=max(1, self._settings.OFFLINE_QUEUE_MAX))

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_ready(self) -> bool:
        return self._state == ConnectionState.CONNECTED and self._socket is not None

    def connect(self, token: str) -> asyncio.Task[None]:
        """Start the connection loop, or return the one already running."""
        if self._task is not None and not self._task.done():
            logger.debug("[STOMP] Connection already active, reusing it")
            return self._task
        self._token = token
        self._set_state(ConnectionState.CONNECTING)
        self._task = asyncio.create_task(self._run(token), name="stomp-transport")
        return self._task

    async def wait_until_ready(self, timeout: float | None = None) -> None:
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
        except asyncio.TimeoutError as exc:
            raise NotConnectedError("Realtime connection is not ready") from exc

    def send_nowait(self, frame: StompFrame) -> bool:
        """Queue a frame for the writer. Returns False when not connected."""
        if not self.is_ready():
            return False
        self._writes.put_nowait(frame)
        return True

    def publish(self, destination: str, payload: Any) -> bool:
        frame = send_frame(destination, payload)
        if self.send_nowait(frame):
            return True
        if self._settings.OFFLINE_PUBLISH_POLICY == "queue":
            if len(self._offline) == self._offline.maxlen:
                logger.warning("[STOMP] Offline queue full, dropping oldest frame")
            self._offline.append(frame)
            logger.info("[STOMP] Not connected, queued message for %s", destination)
            return True
        logger.warning("STOMP client not connected, cannot send to: %s", destination)
        return False

    async def close(self) -> None:
        # DISCONNECT goes behind frames already queued, so UNSUBSCRIBEs land first.
        if self.send_nowait(disconnect_frame()):
            try:
                await asyncio.wait_for(self._writes.join(), CLOSE_FLUSH_TIMEOUT_SECONDS)
            except asyncio.TimeoutError:
                logger.debug("[STOMP] DISCONNECT frame not delivered")
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._offline.clear()
        self._set_state(ConnectionState.DISCONNECTED)
        logger.info("[STOMP] Disconnected")

    async def _run(self, token: str) -> None:
        url = self._settings.ws_url(token)
        delay = self._settings.RECONNECT_DELAY_SECONDS
        while True:
            if token_expired(token, self._clock.now()):
                logger.warning("[STOMP] Session token expired, giving up reconnecting")
                break
            self._set_state(ConnectionState.CONNECTING)
            try:
                socket = await self._socket_factory(url)
            except Exception as exc:
                logger.warning("[STOMP] Connection failed: %s", exc)
            else:
                try:
                    await self._serve(socket)
                except Exception as exc:
                    logger.warning("[STOMP] Connection lost: %s", exc)
                finally:
                    await self._drop(socket)
                logger.info("[STOMP] Disconnected from server")
            self._set_state(ConnectionState.DISCONNECTED)
            logger.info("[STOMP] Reconnecting in %.1fs", delay)
            await asyncio.sleep(delay)
        self._set_state(ConnectionState.DISCONNECTED)

    async def _serve(self, socket: Socket) -> None:
        self._socket = socket
        await socket.send(_encode(connect_frame()))
        writer = asyncio.create_task(self._write_loop(socket), name="stomp-writer")
        try:
            while True:
                frame = _decode(await socket.recv())
                if frame is not None:
                    self._handle(frame)
                if writer.done():
                    # Surfaces the writer's exception, if any.
                    writer.result()
                    return
        finally:
            writer.cancel()
            try:
                await writer
            except (asyncio.CancelledError, Exception):
                pass

    async def _write_loop(self, socket: Socket) -> None:
        while True:
            frame = await self._writes.get()
            try:
                await socket.send(_encode(frame))
            finally:
                self._writes.task_done()

    def _handle(self, frame: StompFrame) -> None:
        if frame.command == FrameCommand.CONNECTED:
            self._set_state(ConnectionState.CONNECTED)
            self._ready.set()
            logger.info("[STOMP] Connected to server")
            if self._on_connected:
                self._on_connected()
            self._flush_offline()
        elif frame.command == FrameCommand.MESSAGE:
            if self._on_message:
                self._on_message(frame)
        elif frame.command == FrameCommand.ERROR:
            logger.error("[STOMP] Error: %s %s", frame.headers.get("message", ""), frame.body or "")
        else:
            logger.debug("[STOMP] Ignoring %s frame", frame.command)

    def _flush_offline(self) -> None:
        if not self._offline:
            return
        logger.info("[STOMP] Flushing %d queued frame(s)", len(self._offline))
        while self._offline:
            self._writes.put_nowait(self._offline.popleft())

    async def _drop(self, socket: Socket) -> None:
        self._socket = None
        self._ready.clear()
        pending = self._writes.qsize()
        while not self._writes.empty():
            self._writes.get_nowait()
            self._writes.task_done()
        if pending:
            logger.warning("[STOMP] Discarded %d unsent frame(s)", pending)
        try:
            await socket.close()
        except Exception:
            logger.debug("[STOMP] Socket close failed", exc_info=True)

    def _set_state(self, state: ConnectionState) -> None:
        if state != self._state:
            logger.debug("[STOMP] %s -> %s", self._state, state)
            self._state = state


def _encode(frame: StompFrame) -> str:
    return frame.model_dump_json(exclude_none=True)


def _decode(raw: str | bytes) -> StompFrame | None:
    try:
        return StompFrame.model_validate_json(raw)
    except ValidationError:
        logger.warning("[STOMP] Dropping malformed frame: %.200r", raw)
        return None
