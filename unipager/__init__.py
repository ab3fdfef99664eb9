"""Building blocks for a POCSAG paging transmitter: codewords, time slots, queue, servers and hardware drivers."""

__version__ = "2.0.0a0"