""" The subscription registry maps event names to the callbacks interested
    in them, and invokes those callbacks when an event arrives. The wildcard
    event name ``*`` receives every event.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, Optional, Set

from loguru import logger

from . import fields
from .message import EventRecord


class CallbackError(Exception):
    """ A subscriber callback raised an exception during dispatch. These are
        handed to the registry's error sink, never raised to the sender.

        :ivar event_name: The subscription the callback was registered under.
        :ivar callback: The callback that failed.
        :ivar record: The :class:`EventRecord` being dispatched.
    """

    def __init__(self, event_name, callback, record, error):
        self.event_name = event_name
        self.callback = callback
        self.record = record
        self.error = error

        message = "callback for event '%s' failed: %s" % (event_name, error)
        Exception.__init__(self, message)


# end of class CallbackError



def log_error(error: Exception) -> None:
    """ Default error sink: report the failure through the log, including
        the original traceback when there is one.
    """

    cause = getattr(error, 'error', None) or error.__cause__ or error

    if cause.__traceback__ is None:
        logger.error(str(error))
    else:
        logger.opt(exception=cause).error(str(error))



class Registry:
    """ Mapping of event name to an ordered set of callbacks. Each callback is
        invoked as ``callback(msg, record)``, where *record* is the
        :class:`EventRecord` that arrived.

        The *errors* argument is the error sink; it is called with a
        :class:`CallbackError` whenever a callback raises. If not specified,
        failures are logged.
    """

    def __init__(self, errors: Optional[Callable[[Exception], None]] = None):

        if errors is None:
            errors = log_error

        self.errors = errors
        self.lock = threading.Lock()

        # Dictionaries preserve insertion order, and a dictionary with None
        # values is an ordered set keyed on callback identity.

        self.callbacks: Dict[str, Dict[Callable, None]] = dict()


    def subscribe(self, event_name: str, callback: Callable) -> Callable[[], None]:
        """ Register *callback* for the named event. Registering the same
            callback twice for the same event has no further effect. The
            return value is a function that removes this registration.
        """

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        event_name = str(event_name)

        with self.lock:
            try:
                callbacks = self.callbacks[event_name]
            except KeyError:
                callbacks = dict()
                self.callbacks[event_name] = callbacks

            callbacks[callback] = None

        def unsubscribe():
            self.unsubscribe(event_name, callback)

        return unsubscribe


    def unsubscribe(self, event_name: str, callback: Callable) -> None:
        """ Remove *callback* from the named event. This is a no-op if it is
            not registered. An event with no remaining callbacks is removed.
        """

        event_name = str(event_name)

        with self.lock:
            try:
                callbacks = self.callbacks[event_name]
            except KeyError:
                return

            callbacks.pop(callback, None)

            if len(callbacks) == 0:
                del self.callbacks[event_name]


    def unsubscribe_all(self, event_name: Optional[str] = None) -> None:
        """ Remove every callback for the named event, or every callback for
            every event if no event is specified.
        """

        with self.lock:
            if event_name is None:
                self.callbacks.clear()
            else:
                self.callbacks.pop(str(event_name), None)


    clear = unsubscribe_all


    def subscribed_events(self) -> Set[str]:
        with self.lock:
            return set(self.callbacks.keys())


    def __contains__(self, event_name):
        with self.lock:
            return event_name in self.callbacks


    def __len__(self):
        with self.lock:
            return len(self.callbacks)


    def dispatch(self, record: EventRecord) -> int:
        """ Invoke the callbacks registered for *record.event_name*, followed
            by the wildcard callbacks. A failing callback does not prevent the
            remaining callbacks from running. Returns the number of callbacks
            invoked.
        """

        # Take a snapshot so that callbacks are free to subscribe and
        # unsubscribe while the dispatch is underway.

        groups = list()

        with self.lock:
            if record.event_name != fields.WILDCARD:
                try:
                    specific = self.callbacks[record.event_name]
                except KeyError:
                    pass
                else:
                    groups.append((record.event_name, tuple(specific)))

            try:
                wildcard = self.callbacks[fields.WILDCARD]
            except KeyError:
                pass
            else:
                groups.append((fields.WILDCARD, tuple(wildcard)))

        invoked = 0

        for event_name, callbacks in groups:
            for callback in callbacks:
                invoked += 1
                try:
                    callback(record.msg, record)
                except Exception as e:
                    self._report(CallbackError(event_name, callback, record, e))
                    continue

        return invoked


    def _report(self, error):

        try:
            self.errors(error)
        except Exception:
            logger.exception('error sink failed while reporting: {}', error)


# end of class Registry


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
