import pytest

from config.default_rules import DEFAULT_MODERATION_RULES
from vintage_vault import create_app, db, limiter
from vintage_vault.services.database_service import db_service
from vintage_vault.services.error_tracker import error_tracker
from vintage_vault.services.moderation.rule_cache import CachedRule, RuleCache


class FakeClock:
    """Manually advanced replacement for time.monotonic"""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def build_default_rules():
    return [
        CachedRule(f"rule-{index}", rule['rule_type'], rule['patterns'], rule['severity'],
                   is_regex=rule['is_regex'],
                   replacement_value=rule.get('replacement_value'),
                   description=rule.get('description'))
        for index, rule in enumerate(DEFAULT_MODERATION_RULES)
    ]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def default_rules():
    return build_default_rules()


@pytest.fixture
def rule_cache(default_rules, clock):
    return RuleCache(lambda: default_rules, cache_ttl=3600, clock=clock)


@pytest.fixture
def app():
    app = create_app('testing')
    limiter.reset()
    error_tracker.reset()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    """Application context for calling services directly"""
    with app.app_context():
        yield app


@pytest.fixture
def users(app):
    """Ids and bearer tokens of an admin and a regular member"""
    with app.app_context():
        admin = db_service.create_user('Ada Admin', 'admin@vintagevault.test',
                                       password='admin-password', is_admin=True)
        member = db_service.create_user('Mia Member', 'mia@vintagevault.test',
                                        password='member-password',
                                        profile_picture='https://img.vintagevault.test/mia.png')
        return {
            'admin_id': admin.id,
            'member_id': member.id,
            'admin_token': admin.generate_auth_token(),
            'member_token': member.generate_auth_token(),
        }


@pytest.fixture
def admin_headers(users):
    return {'Authorization': f"Bearer {users['admin_token']}"}


@pytest.fixture
def member_headers(users):
    return {'Authorization': f"Bearer {users['member_token']}"}
