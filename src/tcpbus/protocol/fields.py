""" Wire keywords and constants shared by the framer, the registry and the
    registration client.
"""

# Event names.

DEFAULT_EVENT = "default"
WILDCARD = "*"

# Structured (JSON) record fields.

MSG = "msg"
EVENT_NAME = "event_name"

# Line framing.

DELIMITER = b"\n"
ENCODING = "utf-8"

# Registration service.

BANNER = "REGISTRATION_SERVER"
OK = "OK:"
ERROR = "ERROR:"

REGISTER = "REGISTER"
SUBSCRIBE = "SUBSCRIBE"
UNSUBSCRIBE = "UNSUBSCRIBE"
