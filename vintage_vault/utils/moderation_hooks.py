"""
Submission-time moderation for forum routes

Moderation never blocks a submission: failures are logged, tracked and the
content goes through unmoderated.
"""
from functools import wraps

from flask import current_app, g, request

from vintage_vault.services.error_tracker import error_tracker
from vintage_vault.services.moderation_orchestrator import get_moderator


def moderate_submission(content_type):
    """
    Analyse the 'content' field of the JSON body before the route runs

    Sets g.moderation_result (None when moderation is disabled or failed)
    and g.moderation_settings for the route.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            g.moderation_result = None
            g.moderation_settings = None

            json_data = request.get_json(silent=True)
            content = json_data.get('content') if isinstance(json_data, dict) else None
            if isinstance(content, str) and content.strip():
                try:
                    moderator = get_moderator()
                    settings = moderator.settings_store.get()
                    g.moderation_settings = settings
                    if settings.enabled:
                        result = moderator.analyze(content)
                        for warning in result.warnings:
                            error_tracker.track_error('analysis', warning.message,
                                                      details=warning.to_dict())
                        g.moderation_result = result
                except Exception as e:
                    current_app.logger.error(f"Error moderating {content_type}: {str(e)}")
                    error_tracker.track_error('analysis', str(e),
                                              details={'content_type': content_type})
                    g.moderation_result = None

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def content_to_store(submitted_content):
    """Body to persist: special replacements are applied to unflagged content only"""
    result = g.get('moderation_result')
    if result is not None and not result.is_flagged:
        return result.modified_content, result.has_special_replacements
    return submitted_content, False


def finalize_submission(content_type, entity):
    """Hand the stored entity to the record manager; returns the record or None"""
    result = g.get('moderation_result')
    settings = g.get('moderation_settings')
    if result is None or settings is None:
        return None

    try:
        return get_moderator().record_manager.record_submission(
            content_type, entity.id, result, settings)
    except Exception as e:
        current_app.logger.error(
            f"Error saving moderation for {content_type} {entity.id}: {str(e)}")
        error_tracker.track_error('database', str(e), content_id=entity.id,
                                  details={'content_type': content_type})
        return None
