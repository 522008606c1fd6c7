"""Tests for session logging and redaction."""

import json
import logging

import pytest

from larasession.logging import CHANNELS, JSONFormatter, LoggerConfig, SensitiveDataFilter, getLogger


def make_record(msg, **extra):
    record = logging.LogRecord('session', logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_get_logger_channels():
    assert CHANNELS == ('session', 'security')
    assert getLogger('session').name == 'session'
    assert getLogger('larasession.session.session_manager').name == 'larasession.session.session_manager'
    assert getLogger('sanic.root').name == 'sanic.root'
    assert getLogger('whatever') is logging.getLogger()


def test_session_ids_in_extras_are_masked():
    record = make_record('Session rotated', old_sid='abcdefghijklmnopqrstu', new_sid='zyxwvutsrqponmlkjihgf')

    SensitiveDataFilter().filter(record)

    assert record.old_sid == 'abcdef...'
    assert record.new_sid == 'zyxwvu...'


@pytest.mark.parametrize('message, expected', [
    ('Session-ID: abcdefghijklmnopqrstu', 'Session-ID: abcdef...'),
    ('Cookie: session=abcdefghijklmnopqrstu', 'Cookie: session=abcdef...'),
    ('{"secret_key": "hunter2"}', '{"secret_key": "[REDACTED]"}'),
    ('{"password": "hunter2"}', '{"password": "[REDACTED]"}'),
])
def test_sensitive_values_in_messages_are_redacted(message, expected):
    record = make_record(message)

    SensitiveDataFilter().filter(record)

    assert record.msg == expected


def test_json_formatter_includes_extras():
    record = make_record('Session created', sid='abcdef...')

    data = json.loads(JSONFormatter().format(record))

    assert data['message'] == 'Session created'
    assert data['level'] == 'INFO'
    assert data['logger'] == 'session'
    assert data['sid'] == 'abcdef...'


def test_setup_logger_writes_redacted_json_file(tmp_path):
    logger = LoggerConfig.setup_logger('larasession.tests.file', log_directory=tmp_path, console=False)
    try:
        logger.info("Session created", extra={'sid': 'abcdefghijklmnopqrstu'})
        for handler in logger.handlers:
            handler.flush()

        line = (tmp_path / 'larasession.tests.file.log').read_text().strip()
        assert json.loads(line)['sid'] == 'abcdef...'
        assert logger.propagate is False
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


def test_setup_logger_without_handlers_keeps_propagating():
    logger = LoggerConfig.setup_logger('larasession.tests.bare')

    assert logger.handlers == []
    assert logger.propagate is True


@pytest.mark.parametrize('environment, level', [
    ('production', logging.WARNING),
    ('development', logging.DEBUG),
    ('testing', logging.ERROR),
    ('local', logging.INFO),
])
def test_level_by_environment(environment, level):
    assert LoggerConfig.get_level_by_environment(environment) == level
