"""WebSocket server for the interactive web frontend."""

from __future__ import annotations

import asyncio
import logging
import queue
import threading
from typing import Any, Callable, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from unipager.config import Config, get_config, set_config
from unipager.events import Event, EventHandler, EventType, channel
from unipager.frontend import Request, RequestType, Response
from unipager.telemetry import VERSION, get_telemetry
from unipager.timeslots import TimeSlot

log = logging.getLogger(__name__)

HOST = "0.0.0.0"
PORT = 8055

Send = Callable[[Response], None]

_SIMPLE_EVENTS = {
    EventType.REGISTER_MAIN: None,
    EventType.TEST: EventType.TEST,
    EventType.RESTART: EventType.RESTART,
    EventType.SHUTDOWN: EventType.SHUTDOWN,
}

_FORWARDED = {
    RequestType.TEST: EventType.TEST,
    RequestType.RESTART: EventType.RESTART,
    RequestType.SHUTDOWN: EventType.SHUTDOWN,
}


class ClientConnection:
    """State of one frontend client: its reply channel and whether it is authenticated."""

    def __init__(self, send: Send, password: Optional[str], event_handler: EventHandler) -> None:
        self.send = send
        self.password = password
        self.event_handler = event_handler
        self.auth = False

    def handle(self, request: Request) -> None:
        """Answer a request, refusing everything but authentication until authenticated."""
        if request.kind is RequestType.AUTHENTICATE:
            self.auth = self.password is None or request.payload == self.password
            self.send(Response("Authenticated", self.auth))
        elif self.auth:
            self._handle_request(request)
        else:
            self.send(Response("Authenticated", False))

    def _apply_config(self, config: Config) -> None:
        set_config(config)
        self.event_handler.publish(Event(EventType.CONFIG_UPDATE, config))

    def _handle_request(self, request: Request) -> None:
        kind = request.kind
        if kind is RequestType.SET_CONFIG:
            self._apply_config(request.payload)
        elif kind is RequestType.DEFAULT_CONFIG:
            self._apply_config(Config())
        elif kind is RequestType.SEND_MESSAGE:
            self.event_handler.publish(Event(EventType.MESSAGE_RECEIVED, request.payload))
        elif kind is RequestType.GET_CONFIG:
            self.send(Response("Config", get_config()))
        elif kind is RequestType.GET_VERSION:
            self.send(Response("Version", VERSION))
        elif kind is RequestType.GET_TELEMETRY:
            self.send(Response("Telemetry", get_telemetry()))
        elif kind is RequestType.GET_TIMESLOT:
            self.send(Response("Timeslot", TimeSlot.current()))
        elif kind in _FORWARDED:
            if kind is RequestType.TEST:
                log.info("Initiating test procedure...")
            self.event_handler.publish(Event(_FORWARDED[kind]))


_EVENT_RESPONSES = {
    EventType.TELEMETRY_UPDATE: "Telemetry",
    EventType.TELEMETRY_PARTIAL_UPDATE: "TelemetryUpdate",
    EventType.MESSAGE_RECEIVED: "Message",
    EventType.TIMESLOT: "Timeslot",
    EventType.LOG: "Log",
}


def event_response(event: Event) -> Optional[Response]:
    """The notification sent to all clients for an event, if any."""
    kind = _EVENT_RESPONSES.get(event.kind)
    if kind is None:
        return None
    return Response(kind, event.payload)


async def _read(websocket: Any, connection: ClientConnection) -> None:
    try:
        async for raw in websocket:
            try:
                if not isinstance(raw, str):
                    raise ValueError("binary frame")
                request = Request.from_json(raw)
            except ValueError:
                log.warning("Received unreadable websocket request.")
                continue
            connection.handle(request)
    except ConnectionClosed:
        pass


async def _write(websocket: Any, outbox: asyncio.Queue) -> None:
    try:
        while True:
            response = await outbox.get()
            await websocket.send(response.to_json())
    except ConnectionClosed:
        pass


async def _handle_connection(
    websocket: Any,
    password: Optional[str],
    event_handler: EventHandler,
    peers: dict[int, Send],
    lock: threading.Lock,
) -> None:
    loop = asyncio.get_running_loop()
    outbox: asyncio.Queue = asyncio.Queue()

    def send(response: Response) -> None:
        try:
            loop.call_soon_threadsafe(outbox.put_nowait, response)
        except RuntimeError:
            pass

    connection = ClientConnection(send, password, event_handler)
    key = id(websocket)
    with lock:
        peers[key] = send

    tasks = {
        asyncio.ensure_future(_read(websocket, connection)),
        asyncio.ensure_future(_write(websocket, outbox)),
    }
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in tasks:
            task.cancel()
        with lock:
            peers.pop(key, None)


async def _serve(
    password: Optional[str],
    event_handler: EventHandler,
    peers: dict[int, Send],
    lock: threading.Lock,
) -> None:
    async def handler(websocket: Any, *_: Any) -> None:
        await _handle_connection(websocket, password, event_handler, peers, lock)

    async with websockets.serve(handler, HOST, PORT):
        await asyncio.Future()


def _broadcast(inbox: queue.Queue, peers: dict[int, Send], lock: threading.Lock) -> None:
    while True:
        response = event_response(inbox.get())
        if response is None:
            continue
        with lock:
            senders = list(peers.values())
        for send in senders:
            send(response)


def start(password: Optional[str], event_handler: EventHandler) -> threading.Thread:
    """Serve the frontend WebSocket on port 8055 on background threads."""
    send, inbox = channel()
    event_handler.publish(Event(EventType.REGISTER_WEBSOCKET, send))

    peers: dict[int, Send] = {}
    lock = threading.Lock()

    threading.Thread(
        target=_broadcast, args=(inbox, peers, lock), name="ws-broadcast", daemon=True
    ).start()

    def run() -> None:
        asyncio.run(_serve(password, event_handler, peers, lock))
        log.info("Shutting down websocket server!")

    thread = threading.Thread(target=run, name="websocket", daemon=True)
    thread.start()
    return thread