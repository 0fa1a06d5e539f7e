""" Transport layer: the exception taxonomy, and the TCP producer, listener
    and registration client.
"""

from .base import (
    TransportError,
    TransportTimeout,
    TransportConnectionError,
    TransportProtocolError,
    RegistrationError,
    Transport,
)

from .. import config as _config
from .tcp import producer
from .tcp import registration
from .tcp import listener


_BACKENDS = {
    _config.TCP: producer.TcpProducer,
}


def create(protocol_type, config) -> Transport:
    """ Return a :class:`Transport` instance for *protocol_type*, configured
        with the supplied :class:`tcpbus.config.DriverConfig`.
    """

    protocol_type = str(protocol_type).upper()

    try:
        backend = _BACKENDS[protocol_type]
    except KeyError:
        raise ValueError('unsupported protocol type: %r' % (protocol_type))

    return backend(config)
