import logging

from sqlalchemy.pool import StaticPool

from pharmastock import create_app
from pharmastock.config import EnvReader
from pharmastock.logging_config import PiiRedactionFilter, redact


class TestEnvReader:

    def test_typed_reads_with_fallbacks(self):
        reader = EnvReader({
            'RETRIES': ' 5 ',
            'BROKEN_INT': 'five',
            'FLAG_ON': 'Yes',
            'FLAG_BAD': 'maybe',
            'BLANK': '   ',
        })
        assert reader.int('RETRIES', 3) == 5
        assert reader.int('BROKEN_INT', 3) == 3
        assert reader.bool('FLAG_ON') is True
        assert reader.bool('FLAG_BAD', True) is True
        assert reader.str('BLANK', 'default') == 'default'
        assert len(reader.warnings) == 2


class TestAppConfiguration:

    def test_memory_database_uses_static_pool(self):
        app = create_app({'TESTING': True, 'DATABASE_URL': 'sqlite:///:memory:'})
        options = app.config['SQLALCHEMY_ENGINE_OPTIONS']
        assert options['poolclass'] is StaticPool
        assert 'pool_size' not in options

    def test_file_database_waits_for_locks(self, app):
        assert app.config['SQLALCHEMY_ENGINE_OPTIONS']['connect_args']['timeout'] == 15

    def test_json_blueprints_are_registered(self, app):
        prefixes = {rule.rule.split('/')[2] for rule in app.url_map.iter_rules() if rule.rule.startswith('/api/')}
        assert {'inventory', 'stock', 'distributions', 'services', 'dashboard', 'suggestions', 'alerts'} <= prefixes

    def test_configured_default_rate_limit_is_enforced(self):
        app = create_app({
            'TESTING': True,
            'DATABASE_URL': 'sqlite:///:memory:',
            'RATELIMIT_ENABLED': True,
            'RATELIMIT_STORAGE_URI': 'memory://',
            'RATELIMIT_DEFAULT': '2 per minute',
        })
        client = app.test_client()

        statuses = [client.get('/api/dashboard').status_code for _ in range(3)]

        assert statuses == [401, 401, 429]
        body = client.get('/api/dashboard').get_json()
        assert body['success'] is False
        assert body['message'].startswith('Too many requests')


class TestRedaction:

    def test_emails_and_secrets_are_masked(self):
        message = 'login pharmacist@example.com api_key=abc123 header Bearer xyz.789'
        redacted = redact(message)
        assert 'pharmacist@example.com' not in redacted
        assert 'abc123' not in redacted
        assert 'xyz.789' not in redacted
        assert '[REDACTED_EMAIL]' in redacted

    def test_filter_rewrites_formatted_record(self):
        record = logging.LogRecord('pharmastock', logging.INFO, __file__, 1, 'user %s', ('a@b.io',), None)
        assert PiiRedactionFilter().filter(record) is True
        assert record.getMessage() == 'user [REDACTED_EMAIL]'
