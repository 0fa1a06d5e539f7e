""" The :class:`Driver` is the primary interface to the bus. It sends messages
    through the configured transport, and optionally consumes events through
    an :class:`tcpbus.transport.tcp.listener.EventListener`.

    A typical consumer looks like this::

        driver = tcpbus.Driver.from_address('127.0.0.1:49152')
        driver.register_consumer('127.0.0.1:49153', 'billing', ['order_created'],
                                 consumer_address='127.0.0.1:50001')
        driver.start_listening('127.0.0.1:50001')
        driver.subscribe('order_created', handle_order)
"""

from __future__ import annotations

import time
from typing import Callable, Iterable, List, Optional

from loguru import logger

from . import config as _config
from . import transport
from .protocol import message as framer
from .protocol.registry import Registry
from .transport.tcp.listener import EventListener
from .transport.tcp.registration import RegistrationClient


class Driver:
    """ Send messages to the bus described by *config*, which may be a
        :class:`tcpbus.config.DriverConfig`, a dictionary with any of the
        keys ``protocol``, ``host`` and ``port``, or None for the defaults.

        Event subscriptions made with :func:`subscribe` may be registered
        before :func:`start_listening`; they are held by the driver and handed
        to the listener when it starts. :func:`stop_listening` clears them.
    """

    batch_delay = 0.05

    def __init__(self, config=None, errors: Optional[Callable[[Exception], None]] = None):

        if config is None:
            config = _config.DriverConfig()
        elif isinstance(config, dict):
            config = _config.DriverConfig.from_dict(config)

        self.config = config
        self.protocol = None
        self.listener = None
        self.errors = errors
        self.subscriptions = Registry(errors)
        self._initialized = False


    def __repr__(self):
        return '<Driver %s %s>' % (self.config.protocol, self.config.address)


    @property
    def initialized(self) -> bool:
        return self._initialized


    def initialize(self) -> None:
        """ Instantiate the configured transport. This happens automatically
            on the first :func:`send`; calling it again has no effect.
        """

        if self._initialized:
            return

        try:
            self.protocol = transport.create(self.config.protocol, self.config)
        except ValueError as e:
            raise ValueError('failed to initialize driver: ' + str(e)) from e

        self._initialized = True
        logger.info('Driver initialized with {} protocol', self.config.protocol)
        logger.info('Target address: {}', self.config.address)


    # Producer path.

    def send(self, message: str) -> None:
        """ Send *message*, a non-empty string, to the bus as one line.
        """

        if isinstance(message, str) and message != '':
            pass
        else:
            raise ValueError('message must be a non-empty string')

        self.initialize()

        try:
            self.protocol.send(message)
        except transport.TransportError as e:
            logger.error('failed to send message to {}: {}', self.config.address, e)
            raise


    def send_event(self, msg: str, event_name: str = framer.fields.DEFAULT_EVENT) -> None:
        """ Send *msg* as a structured event named *event_name*.
        """

        self.send(framer.encode(msg, event_name))


    def send_batch(self, messages: Iterable[str], delay=None) -> None:
        """ Send each of *messages* in turn, pausing *delay* seconds between
            them.
        """

        if isinstance(messages, (str, bytes)):
            raise TypeError('messages must be a sequence of strings')

        if delay is None:
            delay = self.batch_delay

        for message in messages:
            self.send(message)
            time.sleep(delay)


    def test_connection(self) -> bool:
        """ Probe the bus with a connect/disconnect, without sending anything.
        """

        self.initialize()
        return self.protocol.test_connection()


    # Consumer path.

    def start_listening(self, config=None, **kwargs) -> EventListener:
        """ Connect an :class:`EventListener` to *config*, a
            :class:`tcpbus.config.ListenerConfig` or ``host:port`` string,
            and return it. Any additional keyword arguments are passed to the
            :class:`EventListener` constructor. Calling this again while a
            listener exists restarts it if it is idle; the endpoint can only
            be changed after :func:`stop_listening`.
        """

        listener = self.listener

        if listener is None:
            if config is None:
                config = _config.ListenerConfig.from_environment()

            listener = EventListener(config, self.subscriptions, self.errors, **kwargs)
            self.listener = listener

        try:
            listener.start()
        except transport.TransportError:
            logger.error('failed to start event listener on {}', listener.config.address)
            raise

        return listener


    def stop_listening(self) -> None:
        """ Stop the event listener, if there is one. This also removes every
            subscription made via :func:`subscribe`.
        """

        listener = self.listener
        self.listener = None

        if listener is None:
            self.subscriptions.clear()
        else:
            listener.stop()


    def subscribe(self, event_name: str, callback: Callable) -> Callable[[], None]:
        """ Invoke *callback(msg, record)* for every received event named
            *event_name*; ``*`` receives all events. Returns a function that
            cancels the subscription.
        """

        return self.subscriptions.subscribe(event_name, callback)


    on = subscribe


    def unsubscribe(self, event_name: str, callback: Callable) -> None:
        self.subscriptions.unsubscribe(event_name, callback)


    off = unsubscribe


    def subscribed_events(self) -> List[str]:
        return sorted(self.subscriptions.subscribed_events())


    def is_listening(self) -> bool:
        return self.listener is not None and self.listener.is_active()


    # Registration service.

    def registration_client(self, registration_address, consumer_address=None) -> RegistrationClient:
        if consumer_address is None:
            if self.listener is not None:
                consumer_address = self.listener.config.address
            else:
                consumer_address = _config.ListenerConfig.from_environment().address

        return RegistrationClient(registration_address, consumer_address)


    def register_consumer(self, registration_address, consumer_id: str,
                          events: Iterable[str] = (), consumer_address=None) -> str:
        """ Register this process as *consumer_id*, interested in *events*,
            reachable at *consumer_address*. Returns the consumer address.
        """

        client = self.registration_client(registration_address, consumer_address)
        return client.register(consumer_id, events)


    def subscribe_remote(self, registration_address, consumer_id: str, event_name: str) -> None:
        client = self.registration_client(registration_address)
        client.subscribe(consumer_id, event_name)


    def unsubscribe_remote(self, registration_address, consumer_id: str, event_name: str) -> None:
        client = self.registration_client(registration_address)
        client.unsubscribe(consumer_id, event_name)


    # Alternate constructors.

    @classmethod
    def create(cls):
        return cls(_config.DriverConfig())


    @classmethod
    def from_address(cls, address):
        return cls(_config.DriverConfig.from_address(address))


    @classmethod
    def with_config(cls, config):
        return cls(config)


# end of class Driver


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
