"""RabbitMQ connection receiving calls from the core network."""

from __future__ import annotations

import json
import logging
import queue
import threading
import time
from datetime import datetime, timezone
from typing import Any

import pika
import pika.exceptions

from unipager import telemetry
from unipager.config import Config
from unipager.core import CoreError, bootstrap
from unipager.events import Event, EventHandler, EventType, channel
from unipager.message import Message
from unipager.timeslots import TimeSlots

log = logging.getLogger(__name__)

AMQP_PORT = 5672
_POLL_INTERVAL = 0.1


def _mark_connected(node: telemetry.Node) -> None:
    node.connected = True
    node.connected_since = datetime.now(timezone.utc)


def _mark_disconnected(node: telemetry.Node) -> None:
    node.connected = False
    node.connected_since = None


class CoreConnection:
    """Bootstraps with the core network and consumes calls over AMQP."""

    def __init__(self, config: Config, event_handler: EventHandler) -> None:
        send, self._inbox = channel()
        event_handler.publish(Event(EventType.REGISTER_CONNECTION, send))
        self.config = config
        self.event_handler = event_handler
        self.routing_key = ""
        self.telemetry_routing_key = ""
        self.restart = True
        self._closing = False

    def start(self) -> None:
        """Connect, and reconnect whenever the connection is lost, until shut down."""
        while True:
            self._handle_pending(None, None)
            if not self.restart:
                return

            try:
                response = bootstrap(self.config)
                timeslots = TimeSlots.from_list(response.timeslots)
            except (CoreError, ValueError):
                log.error(
                    "Bootstrap connection failed. Retrying in %s Seconds...",
                    self.config.master.reconnect_timeout,
                )
                time.sleep(self.config.master.reconnect_timeout)
                continue

            log.info("Bootstrap successful. Found %d nodes.", len(response.nodes))
            self.event_handler.publish(Event(EventType.TIMESLOTS_UPDATE, timeslots))
            log.info("Timeslots updated: %r", timeslots)

            try:
                self._run()
            except pika.exceptions.AMQPError as exc:
                log.debug("AMQP error: %s", exc)
            log.warning("RabbitMQ Connection lost.")

    def _run(self) -> None:
        log.info("Starting RabbitMQ connection.")
        call = self.config.master.call.lower()
        user = f"tx-{call}"
        self.routing_key = call
        self.telemetry_routing_key = f"transmitter.{call}"
        host = self.config.master.server
        port = AMQP_PORT

        telemetry.update("node", lambda _node: telemetry.Node(name=host, port=port))
        log.info("Connecting to %s:%s...", host, port)

        parameters = pika.ConnectionParameters(
            host=host,
            port=port,
            virtual_host="/",
            credentials=pika.PlainCredentials(user, self.config.master.auth),
        )
        connection = pika.BlockingConnection(parameters)
        self._closing = False
        try:
            amqp_channel = connection.channel()
            declared = amqp_channel.queue_declare(queue=call)
            queue_name = declared.method.queue
            amqp_channel.queue_bind(
                queue=queue_name,
                exchange="dapnet.local_calls",
                routing_key=self.routing_key,
            )
            log.info("Connected to RabbitMQ. Listening for incoming calls.")
            telemetry.update("node", _mark_connected)

            for method, _properties, body in amqp_channel.consume(
                queue_name, inactivity_timeout=_POLL_INTERVAL
            ):
                if method is not None:
                    self._handle_delivery(body, method.delivery_tag, amqp_channel)
                self._handle_pending(connection, amqp_channel)
                if self._closing or not connection.is_open:
                    break
        finally:
            telemetry.update("node", _mark_disconnected)
            if connection.is_open:
                connection.close()

    def _handle_delivery(self, body: bytes, delivery_tag: Any, amqp_channel: Any) -> None:
        try:
            message = Message.from_dict(json.loads(body.decode("utf-8")))
        except (ValueError, TypeError):
            message = None

        if message is not None:
            log.info("Message received: %r", message)
            self.event_handler.publish(Event(EventType.MESSAGE_RECEIVED, message))
        else:
            log.warning("Could not decode incoming message")

        amqp_channel.basic_ack(delivery_tag=delivery_tag)

    def _handle_pending(self, connection: Any, amqp_channel: Any) -> None:
        while True:
            try:
                event = self._inbox.get_nowait()
            except queue.Empty:
                return
            self.handle_event(event, connection, amqp_channel)

    def handle_event(self, event: Event, connection: Any, channel: Any) -> None:
        """React to an event from the bus, given the open connection and channel if any."""
        kind = event.kind
        if kind is EventType.TELEMETRY_UPDATE:
            if channel is not None:
                self._send_telemetry(channel, json.dumps(event.payload.to_dict()).encode())
        elif kind is EventType.TELEMETRY_PARTIAL_UPDATE:
            if channel is not None:
                self._send_telemetry(channel, json.dumps(event.payload).encode())
        elif kind is EventType.CONFIG_UPDATE:
            self.restart = True
            self.config = event.payload
            self._close(connection, "reconfig")
        elif kind is EventType.RESTART:
            self.restart = True
            self._close(connection, "restart")
        elif kind is EventType.SHUTDOWN:
            self.restart = False
            self._close(connection, "shutdown")

    def _close(self, connection: Any, reason: str) -> None:
        if connection is not None:
            connection.close(reply_text=reason)
            self._closing = True

    def _send_telemetry(self, amqp_channel: Any, data: bytes) -> None:
        try:
            amqp_channel.basic_publish(
                exchange="dapnet.telemetry",
                routing_key=self.telemetry_routing_key,
                body=data,
            )
        except pika.exceptions.AMQPError as exc:
            log.debug("Telemetry publish failed: %s", exc)


def start(config: Config, event_handler: EventHandler) -> threading.Thread:
    """Run the core connection on a background thread."""
    connection = CoreConnection(copy_config(config), event_handler)
    thread = threading.Thread(target=connection.start, name="connection", daemon=True)
    thread.start()
    return thread


def copy_config(config: Config) -> Config:
    """An independent copy of a configuration."""
    return Config.from_dict(config.to_dict())