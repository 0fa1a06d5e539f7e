""" Python client driver for a line-oriented TCP message bus. This includes
    producer functions, such as sending a message to the bus, and consumer
    functions, such as registering interest in events and dispatching the
    events that arrive to local callbacks.
"""

# Utility components.

from . import json
from . import log

# Submodules used by multiple other components.

from . import config
from . import protocol
from . import transport

# Primary public-facing interfaces.

from .config import DriverConfig, ListenerConfig
from .driver import Driver
from .protocol import CallbackError, EventRecord, Registry
from .transport import (
    TransportError,
    TransportTimeout,
    TransportConnectionError,
    TransportProtocolError,
    RegistrationError,
)
from .transport.tcp.listener import EventListener
from .transport.tcp.registration import RegistrationClient

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
