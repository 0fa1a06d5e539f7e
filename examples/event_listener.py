""" Consume specific events from the bus. This registers a consumer with the
    registration service, connects the event listener to the consumer
    endpoint, and then produces a few events to watch them arrive.

    Usage: python event_listener.py [bus host:port] [registration host:port] [consumer host:port]
"""

import sys
import time

import tcpbus


def main(bus='127.0.0.1:49152', registration='127.0.0.1:49153', consumer='127.0.0.1:50001'):

    tcpbus.log.setup_logging()

    producer = tcpbus.Driver.from_address(bus)
    producer.initialize()

    driver = tcpbus.Driver.from_address(bus)
    driver.register_consumer(registration, 'example-consumer',
                             ('user_login', 'order_created'), consumer_address=consumer)

    def user_login(message, record):
        print('[user_login] ' + message)

    def order_created(message, record):
        print('[order_created] ' + message)

    def everything(message, record):
        print("[*] Event '%s': %s" % (record.event_name, message))

    driver.subscribe('user_login', user_login)
    driver.subscribe('order_created', order_created)
    driver.subscribe('*', everything)

    driver.start_listening(consumer)
    print('Subscribed events: ' + ', '.join(driver.subscribed_events()))

    time.sleep(0.5)

    producer.send_event('User john_doe logged in', 'user_login')
    producer.send_event('Order #12345 created', 'order_created')
    producer.send('user_login:User jane_doe logged in')
    producer.send('A message for the default event')

    try:
        time.sleep(5)
    finally:
        driver.stop_listening()


if __name__ == '__main__':
    main(*sys.argv[1:4])


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
