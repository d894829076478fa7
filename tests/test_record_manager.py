import pytest

from vintage_vault.models.forum_moderation import ModerationRecord
from vintage_vault.services.database_service import db_service
from vintage_vault.services.moderation.errors import NotFoundError, ValidationError
from vintage_vault.services.moderation.websocket_notifier import WebSocketNotifier
from vintage_vault.services.moderation_orchestrator import get_moderator


class RecordingSocketIO:
    def __init__(self, fail=False):
        self.events = []
        self.fail = fail

    def emit(self, event, payload, room=None):
        if self.fail:
            raise RuntimeError('socket closed')
        self.events.append((event, payload, room))


@pytest.fixture
def moderator(ctx):
    return get_moderator()


@pytest.fixture
def manager(moderator):
    return moderator.record_manager


def create_flagged_topic(moderator, author_id, content="you are stupid, this is not 1950s"):
    topic = db_service.create_forum_topic(author_id, 'Is this coat real?', content)
    analysis = moderator.analyze(content)
    return topic, analysis


def test_clean_content_creates_no_record(moderator, manager, users):
    topic = db_service.create_forum_topic(users['member_id'], 'Hello', 'Lovely tweed')

    assert manager.record_if_flagged('topic', topic.id, moderator.analyze('Lovely tweed')) is None
    assert ModerationRecord.query.count() == 0


def test_flagged_content_creates_pending_record(moderator, manager, users):
    topic, analysis = create_flagged_topic(moderator, users['member_id'])

    record = manager.record_if_flagged('topic', topic.id, analysis)

    assert record.status == 'pending'
    assert record.is_flagged is True
    assert record.content_type == 'topic'
    assert record.content_id == topic.id
    assert record.original_content == topic.content
    assert record.moderation_score == analysis.moderation_score
    assert record.issue_types == ['harassment']
    assert record.reviewed_by is None
    assert record.suggested_improvement is None


def test_flagged_record_writes_content_fields(moderator, manager, users):
    topic, analysis = create_flagged_topic(moderator, users['member_id'])

    manager.record_if_flagged('topic', topic.id, analysis,
                              content_fields={'pending_moderation': True,
                                              'moderation_status': 'pending'})

    stored = db_service.get_content_entity('topic', topic.id, fresh=True)
    assert stored.pending_moderation is True
    assert stored.moderation_status == 'pending'


def test_submission_records_through_record_if_flagged(moderator, manager, users, monkeypatch):
    topic, analysis = create_flagged_topic(moderator, users['member_id'])
    calls = []
    original = manager.record_if_flagged

    def tracking(*args, **kwargs):
        calls.append(kwargs.get('content_fields'))
        return original(*args, **kwargs)

    monkeypatch.setattr(manager, 'record_if_flagged', tracking)

    record = manager.record_submission('topic', topic.id, analysis,
                                       moderator.settings_store.get())

    assert record.status == 'pending'
    assert calls == [{'pending_moderation': True, 'moderation_status': 'pending'}]


def test_special_replacement_alone_creates_no_record(moderator, manager, users):
    topic = db_service.create_forum_topic(users['member_id'], 'Hi', 'caca buttons')
    analysis = moderator.analyze('caca buttons')

    assert analysis.has_special_replacements is True
    assert manager.record_if_flagged('topic', topic.id, analysis) is None


def test_approve_decision(moderator, manager, users):
    topic, analysis = create_flagged_topic(moderator, users['member_id'])
    record = manager.record_if_flagged('topic', topic.id, analysis)

    content = manager.apply_decision(record.id, 'approved', users['admin_id'], notes='fine')

    assert content['id'] == topic.id
    assert content['visible'] is True
    assert content['pending_moderation'] is False
    assert content['moderation_status'] == 'approved'
    record = db_service.get_moderation_record(record.id)
    assert record.status == 'approved'
    assert record.review_note == 'fine'
    assert record.reviewed_by == users['admin_id']


def test_reject_decision_hides_content(moderator, manager, users):
    topic, analysis = create_flagged_topic(moderator, users['member_id'])
    record = manager.record_if_flagged('topic', topic.id, analysis)

    content = manager.apply_decision(record.id, 'rejected', users['admin_id'])

    assert content['visible'] is False
    assert content['moderation_status'] == 'rejected'
    assert db_service.get_moderation_record(record.id).review_note == ''


def test_modified_decision_replaces_content(moderator, manager, users):
    topic, analysis = create_flagged_topic(moderator, users['member_id'])
    record = manager.record_if_flagged('topic', topic.id, analysis)

    content = manager.apply_decision(record.id, 'modified', users['admin_id'],
                                     modified_content='I doubt this is from the 1950s')

    assert content['content'] == 'I doubt this is from the 1950s'
    assert content['moderation_status'] == 'approved'
    assert content['visible'] is True
    record = db_service.get_moderation_record(record.id)
    assert record.status == 'modified'
    assert record.suggested_improvement == 'I doubt this is from the 1950s'


def test_modified_without_content_leaves_record_pending(moderator, manager, users):
    topic, analysis = create_flagged_topic(moderator, users['member_id'])
    record = manager.record_if_flagged('topic', topic.id, analysis)

    with pytest.raises(ValidationError):
        manager.apply_decision(record.id, 'modified', users['admin_id'])

    assert db_service.get_moderation_record(record.id).status == 'pending'
    assert db_service.get_content_entity('topic', topic.id).content == topic.content


def test_unknown_record(manager, users):
    with pytest.raises(NotFoundError):
        manager.apply_decision('missing', 'approved', users['admin_id'])


def test_repeating_a_decision_is_idempotent(moderator, manager, users):
    topic, analysis = create_flagged_topic(moderator, users['member_id'])
    record = manager.record_if_flagged('topic', topic.id, analysis)

    first = manager.apply_decision(record.id, 'rejected', users['admin_id'], notes='rude')
    second = manager.apply_decision(record.id, 'rejected', users['admin_id'], notes='still rude')

    assert first['moderation_status'] == second['moderation_status'] == 'rejected'
    assert db_service.get_moderation_record(record.id).review_note == 'still rude'


def test_terminal_records_cannot_change_outcome(moderator, manager, users):
    topic, analysis = create_flagged_topic(moderator, users['member_id'])
    record = manager.record_if_flagged('topic', topic.id, analysis)
    manager.apply_decision(record.id, 'rejected', users['admin_id'])

    with pytest.raises(ValidationError) as excinfo:
        manager.apply_decision(record.id, 'approved', users['admin_id'])

    assert excinfo.value.error_code == 'RECORD_ALREADY_REVIEWED'
    assert db_service.get_content_entity('topic', topic.id).visible is False


def test_list_pending_worst_first_with_author(moderator, manager, users):
    mild_topic, mild = create_flagged_topic(moderator, users['member_id'], 'that is crap')
    worst_topic, worst = create_flagged_topic(
        moderator, users['member_id'], 'shit, you are stupid, visit www.fakes.example')
    manager.record_if_flagged('topic', mild_topic.id, mild)
    manager.record_if_flagged('topic', worst_topic.id, worst)

    pending = manager.list_pending()

    assert [item['content_id'] for item in pending] == [worst_topic.id, mild_topic.id]
    assert pending[0]['content']['author'] == {
        'id': users['member_id'],
        'name': 'Mia Member',
        'profile_picture': 'https://img.vintagevault.test/mia.png'
    }


def test_list_pending_excludes_reviewed(moderator, manager, users):
    topic, analysis = create_flagged_topic(moderator, users['member_id'])
    record = manager.record_if_flagged('topic', topic.id, analysis)
    manager.apply_decision(record.id, 'approved', users['admin_id'])

    assert manager.list_pending() == []


def test_report_on_empty_store(manager):
    report = manager.build_report()

    assert 'Total content moderated: 0' in report
    assert 'Average moderation score: N/A' in report


def test_report_counts_and_histogram(moderator, manager, users):
    first_topic, first = create_flagged_topic(moderator, users['member_id'], 'that is crap')
    second_topic, second = create_flagged_topic(moderator, users['member_id'], 'crap, you are dumb')
    manager.record_if_flagged('topic', first_topic.id, first)
    record = manager.record_if_flagged('topic', second_topic.id, second)
    manager.apply_decision(record.id, 'rejected', users['admin_id'])

    report = manager.build_report()

    assert report.startswith('Moderation Report')
    assert 'Total content moderated: 2' in report
    assert 'Content pending review: 1' in report
    assert 'Content rejected: 1' in report
    # (0.2 + 0.5) / 2
    assert 'Average moderation score: 35.0%' in report
    lines = report.splitlines()
    assert lines.index('- profanity: 2 occurrences') < lines.index('- harassment: 1 occurrences')


def test_record_submission_hides_high_risk_content(moderator, manager, users):
    settings = moderator.settings_store.update(
        {'auto_remove_high_risk': True, 'toxicity_threshold': 0.3})
    topic, analysis = create_flagged_topic(moderator, users['member_id'])

    record = manager.record_submission('topic', topic.id, analysis, settings)

    assert record.status == 'pending'
    entity = db_service.get_content_entity('topic', topic.id, fresh=True)
    assert entity.visible is False
    assert entity.pending_moderation is True
    assert entity.moderation_status == 'pending'


def test_record_submission_keeps_low_risk_content_visible(moderator, manager, users):
    settings = moderator.settings_store.update({'auto_remove_high_risk': True})
    topic, analysis = create_flagged_topic(moderator, users['member_id'], 'that is crap')

    manager.record_submission('topic', topic.id, analysis, settings)

    entity = db_service.get_content_entity('topic', topic.id, fresh=True)
    assert entity.visible is True
    assert entity.pending_moderation is True


def test_record_submission_approves_clean_content(moderator, manager, users):
    settings = moderator.settings_store.get()
    topic = db_service.create_forum_topic(users['member_id'], 'Hi', 'Lovely tweed')

    assert manager.record_submission('topic', topic.id, moderator.analyze('Lovely tweed'),
                                     settings) is None

    entity = db_service.get_content_entity('topic', topic.id, fresh=True)
    assert entity.moderation_status == 'approved'
    assert entity.pending_moderation is False


def test_recent_activity_names_reviewer(moderator, manager, users):
    topic, analysis = create_flagged_topic(moderator, users['member_id'])
    record = manager.record_if_flagged('topic', topic.id, analysis)
    manager.apply_decision(record.id, 'approved', users['admin_id'])

    activity = manager.find_recent_activity(limit=5)

    assert activity[0]['id'] == record.id
    assert activity[0]['reviewer_name'] == 'Ada Admin'


def test_notifier_events(moderator, users):
    socket = RecordingSocketIO()
    manager = type(moderator.record_manager)(db_service, notifier=WebSocketNotifier(socket))
    settings = moderator.settings_store.get()
    topic, analysis = create_flagged_topic(moderator, users['member_id'])

    record = manager.record_submission('topic', topic.id, analysis, settings)
    manager.apply_decision(record.id, 'rejected', users['admin_id'])

    assert [event for event, _, _ in socket.events] == ['moderation_queued', 'moderation_decision']
    assert all(room == 'moderators' for _, _, room in socket.events)
    assert socket.events[1][1]['status'] == 'rejected'
    assert socket.events[1][1]['visible'] is False


def test_notifier_failure_does_not_break_decision(moderator, users):
    manager = type(moderator.record_manager)(
        db_service, notifier=WebSocketNotifier(RecordingSocketIO(fail=True)))
    topic, analysis = create_flagged_topic(moderator, users['member_id'])
    record = manager.record_if_flagged('topic', topic.id, analysis)

    content = manager.apply_decision(record.id, 'approved', users['admin_id'])

    assert content['moderation_status'] == 'approved'
