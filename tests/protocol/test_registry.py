import pytest
import tcpbus

from tcpbus.protocol import EventRecord, Registry


class Recorder:

    def __init__(self, name, log):
        self.name = name
        self.log = log

    def __call__(self, msg, record):
        self.log.append((self.name, msg, record.event_name))


def test_dispatch_exact_and_wildcard():

    log = list()
    registry = Registry()

    registry.subscribe('order_created', Recorder('order', log))
    registry.subscribe('user_login', Recorder('login', log))
    registry.subscribe('*', Recorder('all', log))

    invoked = registry.dispatch(EventRecord('order_created', 'Order #1'))

    assert invoked == 2
    assert log == [('order', 'Order #1', 'order_created'), ('all', 'Order #1', 'order_created')]


def test_dispatch_order():

    log = list()
    registry = Registry()

    # Wildcard registered first still runs after the exact matches.

    registry.subscribe('*', Recorder('wild1', log))
    registry.subscribe('tick', Recorder('tick1', log))
    registry.subscribe('*', Recorder('wild2', log))
    registry.subscribe('tick', Recorder('tick2', log))

    registry.dispatch(EventRecord('tick', ''))

    names = [entry[0] for entry in log]
    assert names == ['tick1', 'tick2', 'wild1', 'wild2']


def test_dispatch_unmatched():

    log = list()
    registry = Registry()
    registry.subscribe('user_login', Recorder('login', log))

    assert registry.dispatch(EventRecord('order_created', 'x')) == 0
    assert log == []


def test_wildcard_named_event_delivered_once():

    log = list()
    registry = Registry()
    registry.subscribe('*', Recorder('all', log))

    registry.dispatch(EventRecord('*', 'odd'))
    assert log == [('all', 'odd', '*')]


def test_callback_errors_are_isolated():

    log = list()
    errors = list()
    registry = Registry(errors.append)

    def broken(msg, record):
        raise RuntimeError('boom')

    registry.subscribe('order_created', broken)
    registry.subscribe('order_created', Recorder('after', log))
    registry.subscribe('*', broken)
    registry.subscribe('*', Recorder('wild', log))

    record = EventRecord('order_created', 'Order #1')
    registry.dispatch(record)

    assert [entry[0] for entry in log] == ['after', 'wild']
    assert len(errors) == 2

    error = errors[0]
    assert isinstance(error, tcpbus.CallbackError)
    assert error.event_name == 'order_created'
    assert error.callback is broken
    assert error.record is record
    assert isinstance(error.error, RuntimeError)

    assert errors[1].event_name == '*'


def test_failing_error_sink():

    log = list()

    def sink(error):
        raise ValueError('sink is broken too')

    registry = Registry(sink)
    registry.subscribe('a', lambda msg, record: 1 / 0)
    registry.subscribe('a', Recorder('after', log))

    registry.dispatch(EventRecord('a', 'x'))
    assert log == [('after', 'x', 'a')]


def test_default_sink_logs():

    registry = Registry()
    registry.subscribe('a', lambda msg, record: 1 / 0)

    # Logged, not raised.
    registry.dispatch(EventRecord('a', 'x'))


def test_subscribe_is_a_set():

    log = list()
    registry = Registry()
    callback = Recorder('once', log)

    registry.subscribe('a', callback)
    registry.subscribe('a', callback)
    registry.dispatch(EventRecord('a', 'x'))

    assert len(log) == 1


def test_unsubscribe_removes_empty_events():

    registry = Registry()
    first = Recorder('first', list())
    second = Recorder('second', list())

    registry.subscribe('a', first)
    registry.subscribe('a', second)
    registry.subscribe('b', first)
    assert registry.subscribed_events() == {'a', 'b'}

    registry.unsubscribe('a', first)
    assert registry.subscribed_events() == {'a', 'b'}

    registry.unsubscribe('a', second)
    assert registry.subscribed_events() == {'b'}
    assert 'a' not in registry

    # Removing something that is not there is not an error.

    registry.unsubscribe('a', second)
    registry.unsubscribe('nope', first)
    assert registry.subscribed_events() == {'b'}


def test_unsubscribe_handle():

    log = list()
    registry = Registry()
    callback = Recorder('x', log)

    unsubscribe = registry.subscribe('a', callback)
    registry.subscribe('b', callback)

    unsubscribe()
    assert registry.subscribed_events() == {'b'}

    registry.dispatch(EventRecord('a', ''))
    assert log == []

    unsubscribe()


def test_unsubscribe_all():

    registry = Registry()
    callback = Recorder('x', list())

    registry.subscribe('a', callback)
    registry.subscribe('b', callback)
    registry.subscribe('*', callback)

    registry.unsubscribe_all('a')
    assert registry.subscribed_events() == {'b', '*'}

    registry.unsubscribe_all()
    assert registry.subscribed_events() == set()
    assert len(registry) == 0


def test_unsubscribe_during_dispatch():

    log = list()
    registry = Registry()

    def once(msg, record):
        log.append(msg)
        registry.unsubscribe('a', once)

    registry.subscribe('a', once)
    registry.dispatch(EventRecord('a', 'first'))
    registry.dispatch(EventRecord('a', 'second'))

    assert log == ['first']


def test_callback_must_be_callable():

    registry = Registry()

    with pytest.raises(TypeError):
        registry.subscribe('a', 'not a function')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
