""" Fire-and-forget message production. Every message gets its own TCP
    connection: connect, write one newline-terminated line, linger briefly so
    the write can drain, close.
"""

from __future__ import annotations

import socket
import time

from loguru import logger

from ...protocol import message as framer
from ..base import Transport, TransportConnectionError, TransportError, TransportTimeout


class TcpProducer(Transport):
    """ Send messages to the bus described by a
        :class:`tcpbus.config.DriverConfig`.

        :ivar timeout: Seconds allowed to connect and write a message.
        :ivar linger: Seconds to wait after writing, before closing.
        :ivar probe_timeout: Seconds allowed for :func:`test_connection`.
    """

    name = 'TCP'

    timeout = 5.0
    linger = 0.1
    probe_timeout = 2.0


    def _connect(self, timeout):

        address = (self.config.host, self.config.port)

        try:
            return socket.create_connection(address, timeout=timeout)
        except socket.timeout as e:
            raise TransportTimeout('TCP connection timeout') from e
        except OSError as e:
            raise TransportConnectionError('TCP connection error: ' + str(e)) from e


    def send(self, message) -> None:
        """ Deliver *message*, a str or bytes, as a single line. A trailing
            newline is added if one is not already present.
        """

        data = framer.frame(message)
        sock = self._connect(self.timeout)

        try:
            try:
                sock.sendall(data)
            except socket.timeout as e:
                raise TransportTimeout('TCP connection timeout') from e
            except OSError as e:
                raise TransportError('failed to send message: ' + str(e)) from e

            time.sleep(self.linger)
        finally:
            sock.close()

        logger.debug('sent {} bytes to {}', len(data), self.config.address)


    def test_connection(self) -> bool:
        """ Connect and immediately disconnect, without sending anything.
            Returns True on success; connection failures are raised.
        """

        sock = self._connect(self.probe_timeout)
        sock.close()
        return True


# end of class TcpProducer


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
