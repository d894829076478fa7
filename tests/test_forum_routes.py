import pytest

from vintage_vault.services.error_tracker import error_tracker
from vintage_vault.services.moderation_orchestrator import get_moderator


def post_topic(client, headers, content, title='1950s wool coat'):
    return client.post('/api/forum/topics', json={'title': title, 'content': content},
                       headers=headers)


def test_posting_requires_identity(client):
    response = post_topic(client, {}, 'Anyone know this label?')

    assert response.status_code == 401


def test_clean_topic_is_approved(client, member_headers):
    response = post_topic(client, member_headers, 'Anyone know this label? Looks 1960s.')

    assert response.status_code == 201
    body = response.get_json()
    assert body['moderation']['queued'] is False
    topic = body['data']
    assert topic['visible'] is True
    assert topic['pending_moderation'] is False
    assert topic['moderation_status'] == 'approved'
    assert topic['author']['name'] == 'Mia Member'


def test_special_replacements_apply_to_unflagged_topics(client, member_headers):
    response = post_topic(client, member_headers, 'The lining is caca but the wool is fine')

    topic = response.get_json()['data']
    assert topic['content'] == 'The lining is \U0001F4A9 but the wool is fine'
    assert topic['has_special_replacements'] is True


def test_flagged_topic_is_queued_unchanged(client, member_headers):
    content = 'shit lining, you are dumb for buying it'
    response = post_topic(client, member_headers, content)

    body = response.get_json()
    assert body['moderation']['queued'] is True
    topic = body['data']
    assert topic['content'] == content
    assert topic['has_special_replacements'] is False
    assert topic['visible'] is True
    assert topic['pending_moderation'] is True
    assert topic['moderation_status'] == 'pending'


def test_high_risk_topic_is_hidden_when_configured(client, app, member_headers):
    with app.app_context():
        get_moderator().settings_store.update(
            {'auto_remove_high_risk': True, 'toxicity_threshold': 0.5})

    response = post_topic(client, member_headers,
                          'shit, you are stupid, go to www.knockoffs.example')

    topic = response.get_json()['data']
    assert topic['visible'] is False
    assert client.get(f"/api/forum/topics/{topic['id']}").status_code == 404


def test_disabled_moderation_skips_analysis(client, app, member_headers):
    with app.app_context():
        get_moderator().settings_store.update({'enabled': False})

    response = post_topic(client, member_headers, 'you are stupid')

    body = response.get_json()
    assert body['moderation']['queued'] is False
    assert body['data']['moderation_status'] is None


def test_moderation_failure_never_blocks_submission(client, app, member_headers, monkeypatch):
    def broken_analyze(content):
        raise RuntimeError('rule store offline')

    monkeypatch.setattr(app.extensions['content_moderation'], 'analyze', broken_analyze)

    response = post_topic(client, member_headers, 'you are stupid')

    assert response.status_code == 201
    assert response.get_json()['moderation']['queued'] is False
    assert error_tracker.get_error_stats()['error_counts']['analysis'] == 1


def test_reply_is_moderated(client, member_headers):
    topic = post_topic(client, member_headers, 'Sizing question').get_json()['data']

    response = client.post(f"/api/forum/topics/{topic['id']}/replies",
                           json={'content': 'shut up, it is obviously a 38'},
                           headers=member_headers)

    assert response.status_code == 201
    body = response.get_json()
    assert body['moderation']['queued'] is True
    assert body['data']['topic_id'] == topic['id']
    assert body['data']['moderation_status'] == 'pending'


def test_reply_to_unknown_topic(client, member_headers):
    response = client.post('/api/forum/topics/missing/replies',
                           json={'content': 'hello'}, headers=member_headers)

    assert response.status_code == 404


def test_rejected_reply_is_hidden_from_topic(client, member_headers, admin_headers):
    topic = post_topic(client, member_headers, 'Sizing question').get_json()['data']
    client.post(f"/api/forum/topics/{topic['id']}/replies",
                json={'content': 'Looks like a UK 12'}, headers=member_headers)
    reply = client.post(f"/api/forum/topics/{topic['id']}/replies",
                        json={'content': 'you are an idiot'}, headers=member_headers).get_json()

    client.post(f"/api/moderation/decision/{reply['moderation']['moderation_id']}",
                json={'decision': 'rejected'}, headers=admin_headers)

    replies = client.get(f"/api/forum/topics/{topic['id']}").get_json()['data']['replies']
    assert [r['content'] for r in replies] == ['Looks like a UK 12']


@pytest.mark.parametrize('payload', [
    {'title': '', 'content': 'text'},
    {'title': 'Title', 'content': '   '},
    {'title': 'Title'},
    {'title': 'Title', 'content': 'text', 'extra': True},
])
def test_invalid_topic_payloads(client, member_headers, payload):
    response = client.post('/api/forum/topics', json=payload, headers=member_headers)

    assert response.status_code == 400
