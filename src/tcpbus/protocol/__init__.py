from . import fields
from . import message
from . import registry

from .message import EventRecord, decode, encode, frame
from .registry import CallbackError, Registry


"""
tcpbus Protocol Layer
=====================

This package defines the line-oriented text protocol spoken on the bus, and
the in-process routing of decoded events to subscriber callbacks.

The protocol layer MUST NOT depend on any transport implementation; sockets,
reconnection and the registration handshake live in :mod:`tcpbus.transport`.

---------------------------------------------------------------------

Layer Overview
--------------

Driver (driver.py)
    Caller-facing facade: send, start_listening, subscribe, register

    │
    ▼
Transport (transport/tcp)
    Moves bytes
    - producer:      one connection per outgoing message
    - registration:  banner / command / OK-ERROR handshake
    - listener:      long-lived connection, reconnection, line framing

    │
    ▼
Registry (registry.py)
    event name -> ordered set of callbacks, wildcard dispatch

    │
    ▼
Message (message.py)
    EventRecord, ordered decoders (JSON object, then event:message)

    │
    ▼
Field Vocabulary (fields.py)
    Canonical names and protocol keywords

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
