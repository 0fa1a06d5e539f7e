import pytest

import unitserver


@pytest.fixture
def server():
    """ A recording TCP server, closed at the end of the test.
    """

    instance = unitserver.Server()

    yield instance

    instance.close()


@pytest.fixture
def registrar():
    """ A registration service that accepts every command. Tests that need a
        different response can replace the handler's attributes.
    """

    handler = unitserver.Registrar()
    instance = unitserver.Server(handler)
    instance.registrar = handler

    yield instance

    instance.close()


@pytest.fixture
def scheduler():
    """ Stand-in for threading.Timer that records reconnection delays instead
        of waiting; tests fire the recorded timers by hand.
    """

    return FakeScheduler()



class FakeTimer:

    def __init__(self, delay, function):
        self.delay = delay
        self.function = function
        self.started = False
        self.cancelled = False
        self.daemon = False


    def start(self):
        self.started = True


    def cancel(self):
        self.cancelled = True


    def fire(self):
        if self.cancelled == False:
            self.function()


# end of class FakeTimer



class FakeScheduler:

    def __init__(self):
        self.timers = list()


    def __call__(self, delay, function):
        timer = FakeTimer(delay, function)
        self.timers.append(timer)
        return timer


    @property
    def delays(self):
        return [timer.delay for timer in self.timers]


# end of class FakeScheduler


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
