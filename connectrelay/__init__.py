"""connectrelay: chat-driven configuration and display of a live event stream.

A chat command surface edits a stream filter document held by a
configuration state machine.  Every accepted edit is persisted, pushed to
the live event source and acknowledged in every configured room.  Records
coming back from the source are projected through a set of dot-paths and
broadcast as one line each.
"""

__version__ = "0.1.0"

from connectrelay.core.selector import FieldSelector
from connectrelay.core.state_machine import ConfigStateMachine
from connectrelay.projection.engine import ProjectionEngine
from connectrelay.relay import Relay

__all__ = [
    "ConfigStateMachine",
    "FieldSelector",
    "ProjectionEngine",
    "Relay",
    "__version__",
]
