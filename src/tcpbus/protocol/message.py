""" The message framer: translate one delimited line of wire text into an
    :class:`EventRecord`, and an event back into wire text.

    Two line formats are understood. The structured format is a JSON object
    with ``msg`` and ``event_name`` fields::

        {"msg": "Order #12345 created", "event_name": "order_created"}

    The simple format is ``event_name:message``::

        order_created:Order #12345 created

    Decoding tries each entry in :data:`DECODERS` in order; the last entry
    accepts any non-empty line, so :func:`decode` never fails for a line that
    has content.
"""

from __future__ import annotations

from dataclasses import dataclass

from .. import json
from . import fields


@dataclass(frozen=True)
class EventRecord:
    """ A single event as delivered to subscriber callbacks.

        :ivar event_name: The routing name of the event.
        :ivar msg: The message body.
    """

    event_name: str = fields.DEFAULT_EVENT
    msg: str = ''


    def encode(self) -> str:
        return encode(self.msg, self.event_name)


# end of class EventRecord



def decode_structured(line: str) -> EventRecord:
    """ Interpret *line* as a JSON object. Raises :class:`ValueError` if the
        line is not a JSON object, which is the cue to try the next decoder.
        A missing or null ``msg`` is empty, and a non-string ``msg`` is passed
        on as its JSON text. A missing or falsy ``event_name`` is the default
        event; a non-string one, such as ``true`` or ``7``, becomes its JSON
        text.
    """

    try:
        decoded = json.loads(line)
    except json.JSONDecodeError as e:
        raise ValueError('invalid JSON format: ' + str(e)) from e

    if isinstance(decoded, dict):
        pass
    else:
        raise ValueError('structured message must be a JSON object')

    msg = decoded.get(fields.MSG)
    event_name = decoded.get(fields.EVENT_NAME)

    if msg is None:
        msg = ''
    elif isinstance(msg, str):
        pass
    else:
        # Non-string bodies are handed to callbacks as their JSON text.
        msg = json.dumps_text(msg)

    if not event_name:
        event_name = fields.DEFAULT_EVENT
    elif isinstance(event_name, str):
        pass
    else:
        event_name = json.dumps_text(event_name)

    return EventRecord(event_name=event_name, msg=msg)



def decode_simple(line: str) -> EventRecord:
    """ Interpret *line* as ``event_name:message``. Only the first colon is
        significant; any others are part of the message. A line without a
        colon is a message for the default event.
    """

    event_name, colon, msg = line.partition(':')

    if colon == '':
        return EventRecord(event_name=fields.DEFAULT_EVENT, msg=line.strip())

    event_name = event_name.strip()
    if event_name == '':
        event_name = fields.DEFAULT_EVENT

    return EventRecord(event_name=event_name, msg=msg.strip())



DECODERS = (decode_structured, decode_simple)


def decode(line, decoders=DECODERS) -> EventRecord:
    """ Return an :class:`EventRecord` for one line of wire text, which may
        be bytes or str, with or without its terminating newline. Blank lines
        do not describe an event and raise :class:`ValueError`.
    """

    try:
        line = line.decode(fields.ENCODING, errors='replace')
    except AttributeError:
        pass

    line = line.strip()

    if line == '':
        raise ValueError('cannot decode an empty line')

    failures = list()

    for decoder in decoders:
        try:
            return decoder(line)
        except ValueError as e:
            failures.append(str(e))
            continue

    raise ValueError('no decoder accepted the line: ' + '; '.join(failures))



def encode(msg: str, event_name: str = fields.DEFAULT_EVENT) -> str:
    """ Return the structured wire form of an event, with both fields
        present. The returned string is not newline terminated; see
        :func:`frame`.
    """

    structure = {fields.MSG: msg, fields.EVENT_NAME: event_name}
    return json.dumps_text(structure)



def frame(text) -> bytes:
    """ Return *text* as bytes ready for the wire, terminated by exactly one
        newline. A newline is only appended if one is not already present.
    """

    try:
        text = text.encode(fields.ENCODING)
    except AttributeError:
        pass

    if text.endswith(fields.DELIMITER):
        return text

    return text + fields.DELIMITER


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
