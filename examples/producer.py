""" Send a handful of messages to the bus.

    Usage: python producer.py [host:port]
"""

import sys

import tcpbus


def main(address='127.0.0.1:49152'):

    tcpbus.log.setup_logging()

    driver = tcpbus.Driver.from_address(address)

    try:
        driver.test_connection()
    except tcpbus.TransportError as e:
        print('bus not reachable at %s: %s' % (address, e))
        return 1

    driver.send('Hello from the tcpbus driver')
    driver.send_event('Order #12345 created', 'order_created')
    driver.send_batch(['batch message 1', 'batch message 2', 'batch message 3'])

    return 0


if __name__ == '__main__':
    sys.exit(main(*sys.argv[1:2]))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
