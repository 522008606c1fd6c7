"""Tests for Config and EnvHelper."""

import pytest

from larasession.support import Config, EnvHelper


def test_default_when_nothing_is_configured():
    assert Config.get('session.COOKIE_NAME', 'session') == 'session'
    assert Config.has('session.COOKIE_NAME') is False


def test_runtime_override_is_case_insensitive():
    Config.set('session.COOKIE_NAME', 'sid')

    assert Config.get('SESSION.cookie_name') == 'sid'
    assert Config.has('session.COOKIE_NAME') is True


def test_runtime_override_beats_environment(monkeypatch):
    monkeypatch.setenv('SESSION_DRIVER', 'redis')
    Config.set('session.DRIVER', 'file')

    assert Config.get('session.DRIVER', 'array') == 'file'


@pytest.mark.parametrize('raw, default, expected', [
    ('false', True, False),
    ('on', False, True),
    ('60', 300, 60),
    ('soon', 300, 300),
    ('/health, /metrics', [], ['/health', '/metrics']),
    ('{"secure_prefix": true}', {}, {'secure_prefix': True}),
    ('{broken', {'path': '/'}, {'path': '/'}),
    ('3600', None, '3600'),
])
def test_environment_values_follow_default_type(monkeypatch, raw, default, expected):
    monkeypatch.setenv('SESSION_SOME_KEY', raw)

    assert Config.get('session.SOME_KEY', default) == expected


def test_config_module_wins_over_environment(monkeypatch, tmp_path):
    package = tmp_path / 'config'
    package.mkdir()
    (package / '__init__.py').write_text('')
    (package / 'session.py').write_text(
        "COOKIE_NAME = 'from_module'\n"
        "COOKIE_SET_OPTIONS = {'domain': 'example.com', 'secure': True}\n"
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.setenv('SESSION_COOKIE_NAME', 'from_env')

    assert Config.get('session.COOKIE_NAME') == 'from_module'
    assert Config.get('session.cookie_set_options.DOMAIN') == 'example.com'
    assert Config.get('session.HEADER_NAME', 'Session-ID') == 'Session-ID'


def test_dotenv_file_is_read(monkeypatch, tmp_path):
    env_file = tmp_path / '.env'
    env_file.write_text('SESSION_HEADER_NAME=X-Session\n')
    # Registered so monkeypatch restores it after load_dotenv overwrites it
    monkeypatch.setenv('SESSION_HEADER_NAME', 'placeholder')

    assert EnvHelper.load(env_file, override=True) is True
    assert Config.get('session.HEADER_NAME', 'Session-ID') == 'X-Session'


def test_missing_dotenv_file_is_not_an_error(tmp_path):
    assert EnvHelper.load(tmp_path / '.env') is False
    assert EnvHelper.has('SESSION_NOT_SET') is False
    assert EnvHelper.get('SESSION_NOT_SET', 'fallback') == 'fallback'
