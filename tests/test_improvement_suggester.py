import pytest

from vintage_vault.services.database_service import db_service
from vintage_vault.services.error_tracker import error_tracker
from vintage_vault.services.moderation.errors import OracleError, ValidationError
from vintage_vault.services.moderation.improvement_suggester import (
    HARASSMENT_TEMPLATE,
    ImprovementSuggester,
)
from vintage_vault.services.moderation_orchestrator import get_moderator


class FakeOracle:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def rewrite(self, content, issues):
        self.calls.append((content, issues))
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def moderator(ctx):
    return get_moderator()


@pytest.fixture
def make_record(moderator, users):
    def _make_record(content):
        topic = db_service.create_forum_topic(users['member_id'], 'Question', content)
        analysis = moderator.analyze(content)
        return moderator.record_manager.record_if_flagged('topic', topic.id, analysis)
    return _make_record


@pytest.fixture
def suggester(moderator):
    return ImprovementSuggester(moderator.rule_cache, db_service)


def test_profanity_is_masked(suggester, make_record):
    record = make_record('this crap lining is torn')

    assert suggester.suggest(record) == 'this **** lining is torn'


def test_special_replacements_are_reapplied(suggester, make_record):
    record = make_record('caca seller sent crap')

    assert suggester.suggest(record) == '\U0001F4A9 seller sent ****'


def test_spam_markers_are_neutralised(suggester, make_record):
    record = make_record('buy now at www.vintage-deals.example 50% off')

    assert suggester.suggest(record) == 'consider purchasing at [link removed] discount'


def test_harassment_is_replaced_by_template(suggester, make_record):
    record = make_record('you are stupid if you paid that much')

    assert suggester.suggest(record) == HARASSMENT_TEMPLATE


def test_suggestion_is_persisted(suggester, make_record):
    record = make_record('that is crap')
    suggestion = suggester.suggest(record)

    assert db_service.get_moderation_record(record.id).suggested_improvement == suggestion


def test_record_without_issues_is_rejected(suggester, make_record):
    record = make_record('that is crap')
    record.issues = []

    with pytest.raises(ValidationError):
        suggester.suggest(record)


def test_oracle_rewrite_is_adopted(moderator, make_record):
    oracle = FakeOracle(response='I have doubts about this seller')
    suggester = ImprovementSuggester(moderator.rule_cache, db_service, oracle=oracle)
    record = make_record('you are stupid, this seller is a fraud')

    assert suggester.suggest(record) == 'I have doubts about this seller'
    content, issues = oracle.calls[0]
    assert content == 'you are stupid, this seller is a fraud'
    assert issues[0]['type'] == 'harassment'


def test_second_call_is_a_cache_hit(moderator, make_record):
    oracle = FakeOracle(response='Polite version')
    suggester = ImprovementSuggester(moderator.rule_cache, db_service, oracle=oracle)
    record = make_record('that is crap')

    first = suggester.suggest(record)
    second = suggester.suggest(db_service.get_moderation_record(record.id))

    assert first == second == 'Polite version'
    assert len(oracle.calls) == 1


@pytest.mark.parametrize('oracle', [
    FakeOracle(error=OracleError('timed out')),
    FakeOracle(error=RuntimeError('connection reset')),
    FakeOracle(response='that is crap'),
    FakeOracle(response=''),
])
def test_oracle_failures_return_original(moderator, make_record, oracle):
    suggester = ImprovementSuggester(moderator.rule_cache, db_service, oracle=oracle)
    record = make_record('that is crap')

    assert suggester.suggest(record) == 'that is crap'
    assert db_service.get_moderation_record(record.id).suggested_improvement == 'that is crap'


def test_oracle_failure_is_tracked(moderator, make_record):
    suggester = ImprovementSuggester(
        moderator.rule_cache, db_service, oracle=FakeOracle(error=OracleError('timed out')))
    record = make_record('that is crap')

    suggester.suggest(record)

    assert error_tracker.get_error_stats()['error_counts']['oracle'] == 1
