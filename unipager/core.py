"""HTTP calls to the core network: bootstrap and heartbeat."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Optional

import requests

from unipager.config import Config
from unipager.events import EventHandler
from unipager.telemetry import VERSION

log = logging.getLogger(__name__)

_HEARTBEAT_INTERVAL = 60
_REQUEST_TIMEOUT = 30


class CoreError(Exception):
    """A request to the core network failed or returned unusable data."""


@dataclass
class Node:
    host: str
    reachable: bool
    last_seen: Optional[str] = None


@dataclass
class BootstrapResponse:
    timeslots: list[bool]
    nodes: dict[str, Node]


@dataclass
class HeartbeatResponse:
    status: str


def _parse_node(data: Any) -> Node:
    if not isinstance(data, dict):
        raise ValueError("node must be an object")
    host = data["host"]
    reachable = data["reachable"]
    last_seen = data.get("last_seen")
    if not isinstance(host, str) or not isinstance(reachable, bool):
        raise ValueError("invalid node")
    if last_seen is not None and not isinstance(last_seen, str):
        raise ValueError("invalid last_seen")
    return Node(host=host, reachable=reachable, last_seen=last_seen)


def _parse_bootstrap(data: Any) -> BootstrapResponse:
    if not isinstance(data, dict):
        raise ValueError("response must be an object")
    timeslots = data["timeslots"]
    nodes = data["nodes"]
    if not isinstance(timeslots, list) or not all(isinstance(s, bool) for s in timeslots):
        raise ValueError("invalid timeslots")
    if not isinstance(nodes, dict):
        raise ValueError("invalid nodes")
    return BootstrapResponse(
        timeslots=list(timeslots),
        nodes={name: _parse_node(node) for name, node in nodes.items()},
    )


def _parse_heartbeat(data: Any) -> HeartbeatResponse:
    if not isinstance(data, dict) or not isinstance(data.get("status"), str):
        raise ValueError("invalid heartbeat response")
    return HeartbeatResponse(status=data["status"])


def _post(config: Config, endpoint: str, body: dict[str, Any], what: str) -> Any:
    url = f"http://{config.master.server}:{config.master.port}/transmitters/{endpoint}"
    try:
        response = requests.post(url, json=body, timeout=_REQUEST_TIMEOUT)
    except requests.RequestException:
        raise CoreError(f"{what} connection failed") from None
    try:
        return response.json()
    except ValueError:
        raise CoreError(f"{what} data parsing failed") from None


def bootstrap(config: Config) -> BootstrapResponse:
    """Announce this transmitter and fetch its time slots and the known nodes."""
    if not config.master.call:
        log.error("No callsign configured.")
        raise CoreError("No callsign configured")
    if not config.master.auth:
        log.error("No auth key configured.")
        raise CoreError("No auth key configured")

    log.info("Connecting to %s:%s...", config.master.server, config.master.port)
    body = {
        "callsign": config.master.call,
        "auth_key": config.master.auth,
        "software": {"name": "UniPager", "version": VERSION},
    }
    data = _post(config, "_bootstrap", body, "Bootstrap")
    try:
        return _parse_bootstrap(data)
    except (KeyError, TypeError, ValueError):
        raise CoreError("Bootstrap data parsing failed") from None


def heartbeat(config: Config) -> HeartbeatResponse:
    """Tell the core network that this transmitter is alive."""
    log.info("Sending Heartbeat")
    body = {"callsign": config.master.call, "auth_key": config.master.auth}
    data = _post(config, "_heartbeat", body, "Heartbeat")
    try:
        return _parse_heartbeat(data)
    except (KeyError, TypeError, ValueError):
        raise CoreError("Heartbeat data parsing failed") from None


def start(config: Config, event_handler: EventHandler) -> threading.Thread:
    """Send a heartbeat every minute on a background thread."""

    def run() -> None:
        while True:
            time.sleep(_HEARTBEAT_INTERVAL)
            try:
                result: Any = heartbeat(config)
            except CoreError as exc:
                result = exc
            log.info("Heartbeat Result: %r", result)

    thread = threading.Thread(target=run, name="heartbeat", daemon=True)
    thread.start()
    return thread