""" The event listener holds a long-lived TCP connection to the endpoint where
    the bus delivers events for this consumer. Incoming bytes are split into
    lines, each line is decoded into an :class:`tcpbus.protocol.EventRecord`,
    and the record is dispatched through a
    :class:`tcpbus.protocol.Registry` to any interested callbacks.

    If an established connection drops, the listener reconnects on its own:
    attempt *n* waits *n* times :attr:`EventListener.reconnect_delay` seconds,
    and after :attr:`EventListener.max_reconnect_attempts` consecutive
    failures it gives up and returns to the idle state. The first connection
    is never retried automatically; a failure there is raised to whoever
    called :func:`EventListener.start`.
"""

from __future__ import annotations

import socket
import threading
from typing import Callable, Optional

import zmq
from loguru import logger

from ... import config as _config
from ...protocol import message as framer
from ...protocol.registry import Registry, log_error
from ..base import TransportConnectionError, TransportError, TransportTimeout
from . import framing, readable


IDLE = 'IDLE'
CONNECTING = 'CONNECTING'
ACTIVE = 'ACTIVE'
RECONNECTING = 'RECONNECTING'
STOPPED = 'STOPPED'


class ReconnectExhausted(TransportError):
    """ The listener gave up after too many failed reconnection attempts.
    """


class EventListener:
    """ Receive events from the endpoint described by *config*, a
        :class:`tcpbus.config.ListenerConfig`. Callbacks registered via
        :func:`on` may be registered before or after :func:`start`, but are
        only invoked while the connection is active.

        The *errors* callable is the error sink: it receives every
        :class:`TransportError` encountered after the connection was
        established, and every :class:`tcpbus.protocol.CallbackError` from a
        failing callback. If not specified these are logged.

        :ivar state: One of IDLE, CONNECTING, ACTIVE, RECONNECTING, STOPPED.
        :ivar reconnect_attempts: Consecutive reconnection attempts so far.
    """

    max_reconnect_attempts = 5
    reconnect_delay = 1.0
    connect_timeout = 5.0

    # Reads are polled with this period, in milliseconds, so that a stopped
    # listener is noticed even if the socket is otherwise silent.

    poll_period = 1000

    # The scheduler must behave like threading.Timer: called with a delay
    # and a function, returning an object with start() and cancel().

    scheduler = threading.Timer


    def __init__(self, config, registry: Optional[Registry] = None,
                 errors: Optional[Callable[[Exception], None]] = None,
                 max_reconnect_attempts=None, reconnect_delay=None,
                 connect_timeout=None, buffer_limit=framing.default_limit):

        if isinstance(config, _config.ListenerConfig):
            pass
        else:
            config = _config.ListenerConfig.from_address(config)

        if errors is None:
            errors = log_error

        if registry is None:
            registry = Registry(errors)

        if max_reconnect_attempts is not None:
            self.max_reconnect_attempts = int(max_reconnect_attempts)
        if reconnect_delay is not None:
            self.reconnect_delay = float(reconnect_delay)
        if connect_timeout is not None:
            self.connect_timeout = float(connect_timeout)

        self.config = config
        self.registry = registry
        self.errors = errors

        self.state = IDLE
        self.socket = None
        self.thread = None
        self.timer = None
        self.reconnect_attempts = 0
        self.buffer = framing.LineBuffer(buffer_limit)

        # All state transitions happen while holding self.lock. The separate
        # start lock serializes connection attempts without blocking stop()
        # for the duration of a slow connect.

        self.lock = threading.RLock()
        self.start_lock = threading.Lock()

        # Incremented for every new connection; a reader thread that finds
        # the generation has moved on knows its socket is no longer current.

        self.generation = 0


    def __repr__(self):
        return '<EventListener %s %s>' % (self.config.address, self.state)


    def start(self) -> None:
        """ Connect to the configured endpoint and begin dispatching events.
            This is a no-op if the listener is already active. Connection
            failures are raised as :class:`TransportConnectionError` or
            :class:`TransportTimeout`.
        """

        self._start(reconnecting=False)


    def _start(self, reconnecting):

        with self.start_lock:
            with self.lock:
                if self.state == ACTIVE:
                    return
                if self.state == STOPPED:
                    raise RuntimeError('a stopped listener cannot be restarted')
                if reconnecting and self.state != RECONNECTING:
                    # A manual start() or stop() intervened.
                    return

                self._cancel_timer()
                self.state = CONNECTING

            try:
                sock = self._connect()
            except TransportError:
                with self.lock:
                    if self.state == CONNECTING:
                        if reconnecting:
                            self.state = RECONNECTING
                        else:
                            self.state = IDLE
                raise

            with self.lock:
                if self.state != CONNECTING:
                    # stop() was called while the connection was underway.
                    self._close(sock)
                    return

                self.generation += 1
                self.socket = sock
                self.buffer.clear()
                self.reconnect_attempts = 0
                self.state = ACTIVE

                self.thread = threading.Thread(target=self.run, args=(sock, self.generation))
                self.thread.daemon = True
                self.thread.start()

        logger.info('[EventListener] Connected to {}', self.config.address)


    def _connect(self):

        address = (self.config.host, self.config.port)

        try:
            sock = socket.create_connection(address, timeout=self.connect_timeout)
        except socket.timeout as e:
            raise TransportTimeout('connection timeout: ' + self.config.address) from e
        except OSError as e:
            raise TransportConnectionError('connection error: ' + str(e)) from e

        # No idle timeout, this connection is meant to be long-lived.

        sock.settimeout(None)
        return sock


    def stop(self) -> None:
        """ Close the connection, cancel any pending reconnection, and remove
            all registered callbacks. Calling :func:`stop` more than once is
            harmless.
        """

        with self.lock:
            already = self.state == STOPPED

            self.state = STOPPED
            self._cancel_timer()

            sock = self.socket
            self.socket = None
            self.generation += 1
            self.buffer.clear()
            self.registry.clear()

        if sock is not None:
            self._close(sock)

        if already == False:
            logger.info('[EventListener] Stopped listening on {}', self.config.address)


    def is_active(self) -> bool:
        with self.lock:
            return self.state == ACTIVE and self.socket is not None


    # Registry delegation.

    def on(self, event_name: str, callback: Callable) -> Callable[[], None]:
        """ Invoke *callback(msg, record)* for every event named *event_name*;
            the name ``*`` matches every event. Returns a function that
            removes the registration.
        """

        return self.registry.subscribe(event_name, callback)


    def off(self, event_name: str, callback: Callable) -> None:
        self.registry.unsubscribe(event_name, callback)


    def remove_all_listeners(self, event_name: Optional[str] = None) -> None:
        self.registry.unsubscribe_all(event_name)


    def subscribed_events(self):
        return self.registry.subscribed_events()


    # Receive path.

    def run(self, sock, generation):
        """ Reader thread body for one connection.
        """

        poller = zmq.Poller()
        poller.register(sock, zmq.POLLIN)
        error = None

        while self._current(generation):
            try:
                ready = readable(poller, sock, self.poll_period)
            except (zmq.ZMQError, ValueError) as e:
                # ValueError: the socket was closed out from under the poller.
                error = TransportError('poll failed: ' + str(e))
                break

            if ready == False:
                continue

            try:
                chunk = sock.recv(65536)
            except OSError as e:
                error = TransportError('receive failed: ' + str(e))
                break

            if chunk == b'':
                break

            self.handle(chunk, generation)

        self._disconnected(generation, error)


    def _current(self, generation):
        with self.lock:
            return self.state == ACTIVE and self.generation == generation


    def handle(self, chunk: bytes, generation=None) -> None:
        """ Feed newly received bytes through the line buffer and dispatch
            any complete lines.
        """

        try:
            lines = self.buffer.feed(chunk)
        except framing.LineOverflow as e:
            self._report(e)
            lines = e.lines

        for line in lines:
            if line.strip() == b'':
                continue

            # A stop() issued by an earlier callback ends dispatching.

            if generation is not None and self._current(generation) == False:
                return

            record = framer.decode(line)
            self.registry.dispatch(record)


    def _disconnected(self, generation, error):

        with self.lock:
            if self.generation != generation or self.state != ACTIVE:
                # Stopped, or already replaced by a newer connection.
                return

            sock = self.socket
            self.socket = None
            self._close(sock)

            logger.info('[EventListener] Connection closed: {}', self.config.address)
            exhausted = self._schedule_reconnect()

        if error is not None:
            self._report(error)
        if exhausted is not None:
            self._report(exhausted)


    # Reconnection.

    def _schedule_reconnect(self):
        """ Arrange for the next reconnection attempt. The caller must hold
            the lock. Returns a :class:`ReconnectExhausted` instance, for the
            caller to report, if no further attempts will be made.
        """

        if self.reconnect_attempts >= self.max_reconnect_attempts:
            self.state = IDLE
            self.timer = None
            error = '[EventListener] Max reconnection attempts reached (%d)'
            error = error % (self.max_reconnect_attempts)
            return ReconnectExhausted(error)

        self.reconnect_attempts += 1
        delay = self.reconnect_delay * self.reconnect_attempts
        self.state = RECONNECTING

        logger.info('[EventListener] Reconnecting in {:.0f}ms (attempt {}/{})...',
                    delay * 1000, self.reconnect_attempts, self.max_reconnect_attempts)

        timer = self.scheduler(delay, self._reconnect)
        timer.daemon = True
        self.timer = timer
        timer.start()

        return None


    def _reconnect(self):

        with self.lock:
            if self.state != RECONNECTING:
                # stop() got here first, or a manual start() already ran.
                return
            self.timer = None

        try:
            self._start(reconnecting=True)
        except RuntimeError:
            return
        except TransportError as e:
            logger.error('[EventListener] Reconnection failed: {}', e)

            exhausted = None
            with self.lock:
                if self.state == RECONNECTING:
                    exhausted = self._schedule_reconnect()

            if exhausted is not None:
                self._report(exhausted)


    def _cancel_timer(self):

        timer = self.timer
        self.timer = None

        if timer is not None:
            timer.cancel()


    # Helpers.

    def _close(self, sock):

        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Not connected, or the peer already went away.
            pass

        sock.close()


    def _report(self, error):

        try:
            self.errors(error)
        except Exception:
            logger.exception('error sink failed while reporting: {}', error)


# end of class EventListener


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
