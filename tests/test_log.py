import sys

import tcpbus

from loguru import logger


def test_setup_logging_level(capsys):

    tcpbus.log.setup_logging('warning')

    try:
        logger.info('below the threshold')
        logger.warning('above the {}', 'threshold')
        errors = capsys.readouterr().err
    finally:
        logger.remove()
        logger.add(sys.__stderr__)

    assert 'above the threshold' in errors
    assert 'below the threshold' not in errors
    assert 'WARNING' in errors


def test_default_level(monkeypatch):

    monkeypatch.delenv('TCPBUS_LOG_LEVEL', raising=False)
    assert tcpbus.log.default_level() == 'INFO'

    monkeypatch.setenv('TCPBUS_LOG_LEVEL', 'DEBUG')
    assert tcpbus.log.default_level() == 'DEBUG'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
