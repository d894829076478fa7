import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get(
        'SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL') or 'sqlite:///vintage_vault.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Rewrite oracle (OpenAI primary, OpenRouter fallback)
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
    OPENAI_CHAT_MODEL = os.environ.get('OPENAI_CHAT_MODEL', 'gpt-4o-mini')
    OPENROUTER_API_KEY = os.environ.get('OPENROUTER_API_KEY')
    OPENROUTER_MODEL = os.environ.get('OPENROUTER_MODEL', 'openrouter/auto')
    # Hard ceiling for a single rewrite call, connect + read
    REWRITE_TIMEOUT_SECONDS = float(os.environ.get(
        'REWRITE_TIMEOUT_SECONDS', '10'))
    # Content longer than this is never sent to the oracle
    REWRITE_MAX_CONTENT_TOKENS = int(os.environ.get(
        'REWRITE_MAX_CONTENT_TOKENS', '4000'))

    # Moderation pipeline
    RULE_CACHE_TTL = int(os.environ.get('RULE_CACHE_TTL', '3600'))
    MODERATION_RATE_LIMIT = os.environ.get(
        'MODERATION_RATE_LIMIT', '100 per 15 minutes')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    SEED_MODERATION_DATA = os.environ.get(
        'SEED_MODERATION_DATA', 'true').lower() == 'true'

    # Bearer tokens are issued by the auth service; we only verify them
    AUTH_TOKEN_MAX_AGE = int(os.environ.get('AUTH_TOKEN_MAX_AGE', '86400'))

    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')

    SENTRY_DSN = os.environ.get('SENTRY_DSN')
    FORCE_HTTPS = os.environ.get('FORCE_HTTPS', 'false').lower() == 'true'

    # Database connection preference
    USE_DIRECT_POSTGRES = bool(os.environ.get(
        'DATABASE_URL', '').startswith('postgresql://'))

    # SQLAlchemy connection pool configuration
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 1800,              # Seconds before recreating connection (30 min)
        'pool_pre_ping': True,             # Verify connections before use
        'echo': bool(os.environ.get('SQL_DEBUG', False))  # SQL debugging via env var
    }
    if USE_DIRECT_POSTGRES:
        SQLALCHEMY_ENGINE_OPTIONS.update({
            'pool_size': 5,
            'pool_timeout': 30,
            'max_overflow': 10,
        })


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    FORCE_HTTPS = os.environ.get('FORCE_HTTPS', 'true').lower() == 'true'


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    OPENAI_API_KEY = None
    OPENROUTER_API_KEY = None
    SENTRY_DSN = None
    ADMIN_EMAIL = None
    SEED_MODERATION_DATA = True
    FORCE_HTTPS = False
    RULE_CACHE_TTL = 3600
    MODERATION_RATE_LIMIT = '100 per 15 minutes'
    RATELIMIT_STORAGE_URI = 'memory://'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
