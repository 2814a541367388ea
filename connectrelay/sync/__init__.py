"""Glue between the state machine, the live source and the broadcast sinks."""
