"""Broadcast routing: every message reaches every destination.

Destinations are pluggable sinks: chat rooms, the terminal, or any custom
sink implementing the ``BaseSink`` protocol.  ``BroadcastDispatcher`` fans
each message out to every registered sink; there is no per-sink filtering.
"""
