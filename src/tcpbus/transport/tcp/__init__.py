""" Plain TCP, newline-delimited text transport.
"""


def readable(poller, sock, timeout) -> bool:
    """ Wait up to *timeout* milliseconds for *sock*, a plain socket already
        registered with *poller*, to have something to report; a subsequent
        recv() will then return data, EOF, or raise. The poller identifies a
        non-zmq socket by its file descriptor, not by the object registered.
    """

    ready = dict(poller.poll(timeout))
    return sock in ready or sock.fileno() in ready


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
