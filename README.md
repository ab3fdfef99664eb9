# unipager

Building blocks for a POCSAG paging transmitter on an amateur radio paging
network. The package covers the configuration file, POCSAG codeword
generation, time slot arithmetic, a priority message queue, an event bus,
telemetry, the connection to the network core, the web frontend servers
and drivers for several kinds of transmitter hardware.

## Installation

```
pip install .
```

## Modules

- `unipager.config` – `Config` and its sections (`MasterConfig`, `PttConfig`,
  `AudioConfig`, `C9000Config`, `RaspagerConfig`, `RFM69Config`).
  `Config.load(path)` reads `config.json` and writes a default one if it is
  missing; `get_config()` and `set_config(config)` hold the active copy.
- `unipager.pocsag` – `PocsagMessage` and `MessageType` (numeric or alphanumeric).
- `unipager.encoding` – the numeric and alphanumeric symbol encodings.
- `unipager.generator` – `Generator`, an iterator of 32-bit POCSAG codewords
  (preamble, sync, address and message words, BCH check bits and parity),
  and `TestGenerator`, which yields a given number of preamble words.
- `unipager.message` – `Message` (id, priority, origin, expiry and a POCSAG
  payload) and the `MessageProvider` interface a generator asks for
  further messages.
- `unipager.msgqueue` – `MessageQueue`, one FIFO for each of five priorities,
  highest first.
- `unipager.timeslots` – `TimeSlot` and `TimeSlots`: sixteen 6.4 second slots
  per 102.4 second block, the next allowed slot and the codeword budget.
- `unipager.events` – `Event`, `EventType`, `EventHandler`, `EventDispatcher`
  and `start()`, which runs the dispatcher on a background thread.
- `unipager.telemetry` – shared `Telemetry`, with `update` and `set_value`
  publishing partial updates onto the event bus.
- `unipager.logger` – `init(event_handler)` prints coloured log lines and
  forwards them as events.
- `unipager.core` – `bootstrap(config)` and `heartbeat(config)` HTTP calls to
  the network core; `CoreError` on failure.
- `unipager.connection` – `CoreConnection`, which bootstraps and consumes
  calls over AMQP, reconnecting when the connection is lost.
- `unipager.frontend` – `Request` and `Response` of the websocket protocol.
- `unipager.httpserver` – `make_server(event_handler, host, port)` and
  `start(event_handler)` on port 8073: `GET /telemetry`, `POST /message`,
  and static files from a `unipager/assets` directory when one is present
  (otherwise those paths answer 404).
- `unipager.wsserver` – `start(password, event_handler)` on port 8055 for
  configuration, messages and control; `ClientConnection` handles one client.
- `unipager.model` and `unipager.gpio` – Raspberry Pi model detection and GPIO
  pins through `/dev/mem` or sysfs.
- `unipager.ptt` – push-to-talk by GPIO or serial DTR/RTS (`ptt_from_config`).
- Transmitters implementing `unipager.transmitter.Transmitter.send(words)`:
  `unipager.audio.AudioTransmitter` (plays the baseband through `aplay`),
  `unipager.c9000.C9000Transmitter`, `unipager.raspager.RaspagerTransmitter`
  (ADF7012 boards, with `RASPAGER1_PINS` and `RASPAGER2_PINS`; register model
  in `unipager.adf7012`) and `unipager.rfm69.RFM69Transmitter`.

## Example

```python
from unipager.generator import Generator
from unipager.message import MessageProvider
from unipager.pocsag import MessageType, PocsagMessage
from unipager.timeslots import TimeSlots


class NoMoreMessages(MessageProvider):
    def next_message(self, count):
        return None


message = PocsagMessage(mtype=MessageType.ALPHANUM, ric=12345, data="Hello")
words = list(Generator(NoMoreMessages(), message))
print(f"{len(words)} codewords, first sync word {words[18]:08X}")

slots = TimeSlots.parse("AC39")
print(slots, slots.next_allowed())
```

## What the package does not do

- It installs no command. There is no entry point that loads the
  configuration and starts the servers, the network connection and the
  transmitter together; an application has to call the `start` functions
  of the modules itself.
- There is no scheduler: nothing takes messages from a `MessageQueue`,
  waits for an allowed time slot and hands a `Generator` to a transmitter.
  An application supplies that loop and the `MessageProvider` it needs.
- Nothing builds a transmitter from `Config.transmitter`, and the `Dummy`
  choice of `TransmitterType` has no transmitter class behind it.

## Tests

```
pip install .[test]
pytest
```