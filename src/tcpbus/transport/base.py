""" Exceptions raised by the transport layer, and the interface a message
    producer implements. None of this depends on :mod:`tcpbus.protocol`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class TransportError(Exception):
    """ Base class for all transport-layer errors.
    """


class TransportTimeout(TransportError, TimeoutError):
    """ A connection, handshake, or probe did not complete in time.
    """


class TransportConnectionError(TransportError):
    """ The transport could not establish or maintain a connection.
    """


class TransportProtocolError(TransportError):
    """ The remote end sent something that violates the text protocol.
    """


class RegistrationError(TransportProtocolError):
    """ The registration service answered a command with ``ERROR:``.

        :ivar reason: The text following the ``ERROR:`` prefix.
    """

    def __init__(self, reason: str):
        self.reason = reason
        TransportProtocolError.__init__(self, reason)


# end of class RegistrationError



class Transport(ABC):
    """ The producer side of a bus transport: deliver a message, or check
        that the bus is reachable.
    """

    name = None

    def __init__(self, config):
        self.config = config


    @abstractmethod
    def send(self, message) -> None:
        """ Deliver one message to the bus.
        """


    @abstractmethod
    def test_connection(self) -> bool:
        """ Return True if the bus accepts connections; raise otherwise.
        """


    def protocol_name(self) -> str:
        return self.name


# end of class Transport


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
