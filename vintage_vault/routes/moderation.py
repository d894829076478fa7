from flask import Blueprint, current_app, request
from flask_login import current_user

from vintage_vault import limiter
from vintage_vault.schemas import (
    ModerationDecisionRequest,
    ModerationRuleCreateRequest,
    ModerationRuleUpdateRequest,
    ModerationSettingsUpdateRequest,
)
from vintage_vault.services.database_service import db_service
from vintage_vault.services.error_tracker import error_tracker
from vintage_vault.services.moderation_orchestrator import get_moderator
from vintage_vault.utils.auth import admin_required
from vintage_vault.utils.error_handlers import (
    api_success_response,
    handle_api_error,
    validate_json_request,
)

moderation_bp = Blueprint('moderation', __name__)

# Every moderation route draws on one per-client budget
limiter.shared_limit(lambda: current_app.config['MODERATION_RATE_LIMIT'],
                     scope='moderation')(moderation_bp)


@moderation_bp.route('/pending', methods=['GET'])
@admin_required
@handle_api_error
def pending_moderations():
    """Pending review queue, worst first"""
    pending = get_moderator().record_manager.list_pending()
    return api_success_response({'data': pending, 'count': len(pending)})


@moderation_bp.route('/decision/<moderation_id>', methods=['POST'])
@admin_required
@validate_json_request(ModerationDecisionRequest)
@handle_api_error
def moderation_decision(moderation_id, validated_data=None):
    content = get_moderator().record_manager.apply_decision(
        moderation_id,
        validated_data.decision.value,
        current_user.id,
        notes=validated_data.notes,
        modified_content=validated_data.modified_content
    )
    return api_success_response(
        {'data': content, 'decision': validated_data.decision.value},
        message='Moderation decision processed')


@moderation_bp.route('/suggest/<moderation_id>', methods=['GET'])
@admin_required
@handle_api_error
def suggest_improvement(moderation_id):
    moderator = get_moderator()
    record = moderator.record_manager.get_record(moderation_id)
    suggestion = moderator.suggester.suggest(record)
    return api_success_response({'data': {'suggested_improvement': suggestion}})


@moderation_bp.route('/report', methods=['GET'])
@admin_required
@handle_api_error
def moderation_report():
    report = get_moderator().record_manager.build_report()
    return api_success_response({'data': {'report': report}})


@moderation_bp.route('/settings', methods=['GET'])
@admin_required
@handle_api_error
def get_settings():
    settings = get_moderator().settings_store.get()
    return api_success_response({'data': settings.to_dict()})


@moderation_bp.route('/settings', methods=['PUT'])
@admin_required
@validate_json_request(ModerationSettingsUpdateRequest)
@handle_api_error
def update_settings(validated_data=None):
    settings = get_moderator().settings_store.update(
        validated_data.model_dump(exclude_unset=True))
    return api_success_response({'data': settings.to_dict()},
                                message='Moderation settings updated')


@moderation_bp.route('/rules', methods=['GET'])
@admin_required
@handle_api_error
def list_rules():
    rules = db_service.get_all_moderation_rules()
    return api_success_response({'data': [rule.to_dict() for rule in rules]})


@moderation_bp.route('/rules', methods=['POST'])
@admin_required
@validate_json_request(ModerationRuleCreateRequest)
@handle_api_error
def create_rule(validated_data=None):
    rule = db_service.create_moderation_rule(
        rule_type=validated_data.rule_type.value,
        patterns=validated_data.patterns,
        severity=validated_data.severity,
        replacement_value=validated_data.replacement_value,
        description=validated_data.description,
        is_regex=validated_data.is_regex
    )
    get_moderator().rule_cache.force_refresh()
    current_app.logger.info(f"Moderation rule {rule.id} ({rule.rule_type}) created by {current_user.id}")
    return api_success_response({'data': rule.to_dict()}, message='Rule created'), 201


@moderation_bp.route('/rules/<rule_id>', methods=['PUT'])
@admin_required
@validate_json_request(ModerationRuleUpdateRequest)
@handle_api_error
def update_rule(rule_id, validated_data=None):
    changes = validated_data.model_dump(exclude_unset=True)
    if 'rule_type' in changes and changes['rule_type'] is not None:
        changes['rule_type'] = changes['rule_type'].value
    rule = db_service.update_moderation_rule(rule_id, **changes)
    get_moderator().rule_cache.force_refresh()
    current_app.logger.info(f"Moderation rule {rule.id} updated by {current_user.id}")
    return api_success_response({'data': rule.to_dict()}, message='Rule updated')


@moderation_bp.route('/rules/refresh', methods=['POST'])
@admin_required
@handle_api_error
def refresh_rules():
    """Reload the rule cache without waiting for the TTL"""
    rule_cache = get_moderator().rule_cache
    rule_cache.force_refresh()
    return api_success_response({'data': rule_cache.get_cache_stats()},
                                message='Rule cache refreshed')


@moderation_bp.route('/activity', methods=['GET'])
@admin_required
@handle_api_error
def recent_activity():
    limit = request.args.get('limit', 10, type=int)
    limit = max(1, min(limit, 100))
    activity = get_moderator().record_manager.find_recent_activity(limit)
    return api_success_response({'data': activity})


@moderation_bp.route('/system', methods=['GET'])
@admin_required
@handle_api_error
def system_status():
    """Rule cache state and recovered errors"""
    return api_success_response({'data': {
        'rule_cache': get_moderator().rule_cache.get_cache_stats(),
        'errors': error_tracker.get_error_stats(),
        'recent_errors': error_tracker.get_recent_errors(limit=20)
    }})

