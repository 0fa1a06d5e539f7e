""" Client for the registration service, which is how a consumer tells the
    bus which events it wants routed to it, and where it can be reached.

    Every operation is a short session with the same shape::

        client                          server
          |  ---------- connect ---------> |
          |  <--- ... REGISTRATION_SERVER  |
          |  REGISTER <id> tcp://h:p ev -> |
          |  <------------- OK:... / ERROR:<reason>
          |  ----------- close ----------> |

    The whole session, starting with the connection attempt, must complete
    within :attr:`RegistrationClient.timeout` seconds.
"""

from __future__ import annotations

import socket
import time
from typing import Iterable, Optional, Tuple

import zmq
from loguru import logger

from ... import config
from ...protocol import fields
from ...protocol import message as framer
from . import readable
from ..base import (
    RegistrationError,
    TransportConnectionError,
    TransportError,
    TransportProtocolError,
    TransportTimeout,
)


def _check_token(name, value):
    """ Command arguments are space-separated on the wire; anything with
        embedded whitespace would corrupt the command.
    """

    value = str(value)

    if value == '' or len(value.split()) != 1 or value != value.strip():
        raise ValueError('invalid %s: %r' % (name, value))

    return value



def parse_response(line: str) -> Optional[Tuple[bool, str]]:
    """ Interpret one line from the registration service. Returns None if the
        line is not a terminal response, otherwise a (success, text) tuple
        where *text* is whatever followed the ``OK:`` or ``ERROR:`` prefix.
    """

    line = line.rstrip('\r')

    if line.startswith(fields.OK):
        return (True, line[len(fields.OK):])

    if line.startswith(fields.ERROR):
        return (False, line[len(fields.ERROR):])

    return None



class RegistrationClient:
    """ Register a consumer, reachable at *consumer_address*, with the
        registration service at *registration_address*. Both addresses are
        ``host:port`` strings or (host, port) tuples.
    """

    timeout = 5.0

    def __init__(self, registration_address, consumer_address, timeout=None):

        host, port = config.parse_address(registration_address, default_port=config.default_registration_port)
        self.registration_host = host
        self.registration_port = port

        host, port = config.parse_address(consumer_address, default_port=config.default_listen_port)
        self.consumer_host = host
        self.consumer_port = port

        if timeout is not None:
            self.timeout = float(timeout)


    @property
    def registration_address(self) -> str:
        return config.format_address(self.registration_host, self.registration_port)


    @property
    def consumer_address(self) -> str:
        return config.format_address(self.consumer_host, self.consumer_port)


    def register(self, consumer_id: str, events: Iterable[str] = ()) -> str:
        """ Declare *consumer_id* as a consumer of the named *events*. Returns
            the consumer's own ``host:port``, which is where the event
            listener should connect.
        """

        if isinstance(events, (str, bytes)):
            raise TypeError('events must be a sequence of event names')

        consumer_id = _check_token('consumer id', consumer_id)
        events = [_check_token('event name', event) for event in events]

        command = '%s %s tcp://%s' % (fields.REGISTER, consumer_id, self.consumer_address)

        if events:
            command = command + ' ' + ' '.join(events)

        self.send_command(command)
        logger.info('registered consumer {} at {}', consumer_id, self.consumer_address)
        return self.consumer_address


    def subscribe(self, consumer_id: str, event_name: str) -> None:
        """ Add *event_name* to the events routed to *consumer_id*.
        """

        consumer_id = _check_token('consumer id', consumer_id)
        event_name = _check_token('event name', event_name)
        self.send_command('%s %s %s' % (fields.SUBSCRIBE, consumer_id, event_name))


    def unsubscribe(self, consumer_id: str, event_name: str) -> None:
        """ Stop routing *event_name* to *consumer_id*.
        """

        consumer_id = _check_token('consumer id', consumer_id)
        event_name = _check_token('event name', event_name)
        self.send_command('%s %s %s' % (fields.UNSUBSCRIBE, consumer_id, event_name))


    def send_command(self, command: str) -> str:
        """ Run one registration session for *command*. Returns the text that
            followed ``OK:``; raises :class:`RegistrationError` for an
            ``ERROR:`` response.
        """

        deadline = time.monotonic() + self.timeout
        address = (self.registration_host, self.registration_port)

        try:
            sock = socket.create_connection(address, timeout=self.timeout)
        except socket.timeout as e:
            raise TransportTimeout('registration timeout') from e
        except OSError as e:
            raise TransportConnectionError('registration error: ' + str(e)) from e

        try:
            return self._session(sock, command, deadline)
        except TransportError:
            raise
        except socket.timeout as e:
            raise TransportTimeout('registration timeout') from e
        except OSError as e:
            raise TransportConnectionError('registration error: ' + str(e)) from e
        finally:
            sock.close()


    def _session(self, sock, command, deadline):

        poller = zmq.Poller()
        poller.register(sock, zmq.POLLIN)

        received = ''
        sent = False

        while True:
            if sent:
                result = self._search(received, final=False)
                if result is not None:
                    return self._conclude(command, *result)

            elif fields.BANNER in received:
                sock.sendall(framer.frame(command))
                sent = True
                logger.debug('sent to {}: {}', self.registration_address, command)
                continue

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise TransportTimeout('registration timeout')

            if readable(poller, sock, int(remaining * 1000)) == False:
                continue

            chunk = sock.recv(4096)

            if chunk == b'':
                if sent:
                    result = self._search(received, final=True)
                    if result is not None:
                        return self._conclude(command, *result)

                    error = 'registration server closed the connection without a response'
                else:
                    error = 'registration server closed the connection before the banner'

                raise TransportProtocolError(error)

            received += chunk.decode(fields.ENCODING, errors='replace')


    def _search(self, received, final):
        """ Look for a terminal response among the complete lines received so
            far. If *final* is True the connection is closed, and a trailing
            unterminated line is considered as well.
        """

        lines = received.split('\n')

        if final == False:
            lines = lines[:-1]

        for line in lines:
            if fields.BANNER in line:
                continue

            result = parse_response(line)
            if result is not None:
                return result

        return None


    def _conclude(self, command, success, text):

        if success:
            return text

        verb = command.split(' ', 1)[0]
        logger.warning('{} rejected by {}: {}', verb, self.registration_address, text)
        raise RegistrationError(text)


# end of class RegistrationClient


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
