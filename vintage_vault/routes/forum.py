from flask import Blueprint
from flask_login import current_user

from vintage_vault.schemas import ForumReplyCreateRequest, ForumTopicCreateRequest
from vintage_vault.services.database_service import db_service
from vintage_vault.services.moderation.errors import NotFoundError, ValidationError
from vintage_vault.utils.auth import login_required_json
from vintage_vault.utils.error_handlers import (
    api_success_response,
    handle_api_error,
    validate_json_request,
)
from vintage_vault.utils.moderation_hooks import (
    content_to_store,
    finalize_submission,
    moderate_submission,
)

forum_bp = Blueprint('forum', __name__)


def _visible_topic(topic_id):
    topic = db_service.get_forum_topic(topic_id)
    if topic is None or not topic.visible:
        raise NotFoundError('Topic not found')
    return topic


@forum_bp.route('/topics', methods=['POST'])
@login_required_json
@validate_json_request(ForumTopicCreateRequest)
@moderate_submission('topic')
@handle_api_error
def create_topic(validated_data=None):
    content, has_special_replacements = content_to_store(validated_data.content)
    topic = db_service.create_forum_topic(
        author_id=current_user.id,
        title=validated_data.title,
        content=content,
        has_special_replacements=has_special_replacements
    )
    record = finalize_submission('topic', topic)

    topic = db_service.get_content_entity('topic', topic.id, fresh=True)
    return api_success_response({
        'data': topic.to_dict(),
        'moderation': {
            'queued': record is not None,
            'moderation_id': record.id if record else None
        }
    }), 201


@forum_bp.route('/topics/<topic_id>/replies', methods=['POST'])
@login_required_json
@validate_json_request(ForumReplyCreateRequest)
@moderate_submission('reply')
@handle_api_error
def create_reply(topic_id, validated_data=None):
    topic = _visible_topic(topic_id)
    if topic.is_locked:
        raise ValidationError('Topic is locked', error_code='TOPIC_LOCKED')

    content, has_special_replacements = content_to_store(validated_data.content)
    reply = db_service.create_forum_reply(
        topic_id=topic.id,
        author_id=current_user.id,
        content=content,
        has_special_replacements=has_special_replacements
    )
    record = finalize_submission('reply', reply)

    reply = db_service.get_content_entity('reply', reply.id, fresh=True)
    return api_success_response({
        'data': reply.to_dict(),
        'moderation': {
            'queued': record is not None,
            'moderation_id': record.id if record else None
        }
    }), 201


@forum_bp.route('/topics/<topic_id>', methods=['GET'])
@handle_api_error
def get_topic(topic_id):
    """Visible topic with its visible replies"""
    topic = _visible_topic(topic_id)
    return api_success_response({'data': topic.to_dict(include_replies=True)})
