""" Configuration objects for the driver. Defaults can be overridden from the
    environment: ``TCPBUS_HOST``, ``TCPBUS_PORT`` and ``TCPBUS_PROTOCOL`` for
    the bus, ``TCPBUS_LISTEN_HOST`` and ``TCPBUS_LISTEN_PORT`` for the event
    listener. Environment variables are read when a configuration object is
    created, not at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple


TCP = 'TCP'
protocol_types = (TCP,)

default_host = '127.0.0.1'
default_port = 49152
default_listen_port = 49153
default_registration_port = 49153


def _environment(name, default):

    try:
        value = os.environ[name]
    except KeyError:
        return default

    value = value.strip()
    if value == '':
        return default

    return value



def parse_address(address, default_host=default_host, default_port=None) -> Tuple[str, int]:
    """ Split a ``host:port`` string into a (host, port) tuple. Either half may
        be missing, in which case the corresponding default is used; if there
        is no default port a :class:`ValueError` is raised. A (host, port)
        tuple is accepted as-is, with the port converted to an integer.
    """

    if isinstance(address, (tuple, list)):
        host, port = address
    else:
        address = str(address).strip()

        # Tolerate a scheme prefix, as used in REGISTER commands.

        if '://' in address:
            address = address.split('://', 1)[1]

        host, colon, port = address.rpartition(':')
        if colon == '':
            host = port
            port = ''

    if host is None or host == '':
        host = default_host

    if port is None or port == '':
        if default_port is None:
            raise ValueError('no port specified in address: ' + repr(address))
        port = default_port

    try:
        port = int(port)
    except (TypeError, ValueError):
        raise ValueError('invalid port in address: ' + repr(address))

    if port < 0 or port > 65535:
        raise ValueError('port out of range: ' + str(port))

    return (host, port)



def format_address(host, port) -> str:
    return '%s:%d' % (host, int(port))



class DriverConfig:
    """ Where and how to send messages to the bus.

        :ivar protocol: The transport protocol type; only ``TCP`` is known.
        :ivar host: The bus host name or address.
        :ivar port: The bus port.
    """

    def __init__(self, protocol=None, host=None, port=None):

        if protocol is None or protocol == '':
            protocol = _environment('TCPBUS_PROTOCOL', TCP)
        if host is None or host == '':
            host = _environment('TCPBUS_HOST', default_host)
        if port is None or port == '' or port == 0:
            port = _environment('TCPBUS_PORT', default_port)

        self.protocol = str(protocol).upper()
        self.host = str(host)
        self.port = int(port)


    def __repr__(self):
        return "DriverConfig(protocol=%r, host=%r, port=%d)" % (self.protocol, self.host, self.port)


    def __eq__(self, other):
        if isinstance(other, DriverConfig):
            return (self.protocol, self.host, self.port) == (other.protocol, other.host, other.port)
        return NotImplemented


    @property
    def address(self) -> str:
        return format_address(self.host, self.port)


    @classmethod
    def from_address(cls, address, protocol=None):
        """ Build a :class:`DriverConfig` from a ``host:port`` string. A
            missing or unparseable port falls back to the default.
        """

        try:
            host, port = parse_address(address, default_host, default_port)
        except ValueError:
            host = str(address).split(':')[0]
            port = default_port

        return cls(protocol=protocol, host=host, port=port)


    @classmethod
    def from_dict(cls, config):
        return cls(config.get('protocol'), config.get('host'), config.get('port'))


# end of class DriverConfig



@dataclass(frozen=True)
class ListenerConfig:
    """ The endpoint the event listener connects to in order to receive
        events routed to this consumer.
    """

    host: str = default_host
    port: int = default_listen_port


    def __post_init__(self):
        # Frozen dataclasses need object.__setattr__ to normalize fields.
        object.__setattr__(self, 'host', str(self.host))
        object.__setattr__(self, 'port', int(self.port))


    @property
    def address(self) -> str:
        return format_address(self.host, self.port)


    @classmethod
    def from_address(cls, address):
        host, port = parse_address(address, default_host, default_listen_port)
        return cls(host, port)


    @classmethod
    def from_environment(cls):
        host = _environment('TCPBUS_LISTEN_HOST', default_host)
        port = _environment('TCPBUS_LISTEN_PORT', default_listen_port)
        return cls(host, port)


# end of class ListenerConfig


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
