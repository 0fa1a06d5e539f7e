''' Wrapper module around :mod:`orjson` to handle the equivalent of
    :func:`json.loads` and :func:`json.dumps`.
'''

import orjson


# orjson.dumps returns bytes. Everything in tcpbus that handles encoded JSON
# expects bytes, and decodes to text only at the edge where a str is needed.

dumps = orjson.dumps
loads = orjson.loads

JSONDecodeError = orjson.JSONDecodeError


def dumps_text(*args, **kwargs):
    """ Same as :func:`dumps`, but return a str instead of bytes.
    """

    return dumps(*args, **kwargs).decode()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
