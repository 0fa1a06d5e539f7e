""" Super-simple TCP servers to act as a foil for the client-facing unit
    tests: a stand-in for the bus, for the consumer endpoint the bus delivers
    events to, and for the registration service.
"""

import socket
import threading
import time


def wait_until(predicate, timeout=2):
    """ Poll *predicate* until it returns True, or *timeout* seconds elapse.
        Returns the final result of the predicate.
    """

    expiration = time.time() + timeout

    while time.time() < expiration:
        if predicate():
            return True
        time.sleep(0.01)

    return predicate()



def unused_port():
    """ Return a port number that nothing is listening on, at least for the
        moment.
    """

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(('127.0.0.1', 0))
    port = sock.getsockname()[1]
    sock.close()
    return port



class Server:
    """ Accept TCP connections on an automatically assigned port. Each
        connection is handed to *handler(connection)* in its own thread; the
        default handler records everything received until the peer closes.
    """

    def __init__(self, handler=None):

        self.handler = handler
        self.lock = threading.Lock()
        self.connections = list()
        self.received = list()
        self.accepted = 0
        self.shutdown = False

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(('127.0.0.1', 0))
        sock.listen(8)
        sock.settimeout(0.05)

        self.socket = sock
        self.port = sock.getsockname()[1]
        self.address = '127.0.0.1:%d' % (self.port)

        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()


    def run(self):

        while self.shutdown == False:
            try:
                connection, _address = self.socket.accept()
            except socket.timeout:
                continue
            except OSError:
                break

            connection.settimeout(None)

            with self.lock:
                self.connections.append(connection)
                self.accepted += 1

            handler = self.handler
            if handler is None:
                handler = self.record

            thread = threading.Thread(target=handler, args=(connection,))
            thread.daemon = True
            thread.start()


    def record(self, connection):

        data = b''

        while True:
            try:
                chunk = connection.recv(4096)
            except OSError:
                break

            if chunk == b'':
                break

            data += chunk

        with self.lock:
            self.received.append(data)


    def wait_for_connection(self, count=1, timeout=2):
        return wait_until(lambda: self.accepted >= count, timeout)


    def send(self, data):
        """ Send *data* to every open connection.
        """

        with self.lock:
            connections = list(self.connections)

        for connection in connections:
            connection.sendall(data)


    def drop(self):
        """ Close every open connection, but keep listening.
        """

        with self.lock:
            connections = self.connections
            self.connections = list()

        for connection in connections:
            try:
                connection.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            connection.close()


    def close(self):
        self.shutdown = True
        self.socket.close()
        self.thread.join(1)
        self.drop()


# end of class Server



class Registrar:
    """ Handler for a :class:`Server` that plays the registration service:
        send the *banner*, read one command line, answer with *response*.
        Commands received are recorded in :attr:`commands`. If *response* is
        None the command is never answered.
    """

    def __init__(self, response=b'OK: registered\n', banner=b'Welcome to REGISTRATION_SERVER v1\n'):
        self.response = response
        self.banner = banner
        self.commands = list()


    def __call__(self, connection):

        if self.banner:
            connection.sendall(self.banner)

        data = b''

        while b'\n' not in data:
            try:
                chunk = connection.recv(4096)
            except OSError:
                return

            if chunk == b'':
                return

            data += chunk

        self.commands.append(data.decode())

        if self.response is not None:
            connection.sendall(self.response)

        # Hold the connection open until the client hangs up.

        try:
            connection.recv(4096)
        except OSError:
            pass

        connection.close()


# end of class Registrar


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
