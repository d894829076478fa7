import logging

from vintage_vault.services.error_tracker import error_tracker

logger = logging.getLogger(__name__)

MODERATORS_ROOM = 'moderators'


def _preview(text, length=100):
    if not text:
        return ''
    return text[:length] + '...' if len(text) > length else text


class WebSocketNotifier:
    """Pushes moderation queue changes to connected moderators"""

    def __init__(self, socketio=None):
        self.socketio = socketio

    def _emit(self, event, payload):
        if self.socketio is None:
            return
        try:
            self.socketio.emit(event, payload, room=MODERATORS_ROOM)
        except Exception as e:
            logger.error(f"WebSocket error on {event}: {str(e)}")
            error_tracker.track_error('notification', str(e), details={'event': event})

    def send_record_queued(self, record):
        """A new flagged submission entered the pending queue"""
        self._emit('moderation_queued', {
            'moderation_id': record.id,
            'content_type': record.content_type,
            'content_id': record.content_id,
            'moderation_score': record.moderation_score,
            'issue_types': record.issue_types,
            'content_preview': _preview(record.original_content),
            'timestamp': record.created_at.isoformat() if record.created_at else None
        })

    def send_decision(self, record, content):
        self._emit('moderation_decision', {
            'moderation_id': record.id,
            'status': record.status,
            'content_type': record.content_type,
            'content_id': record.content_id,
            'visible': content.get('visible'),
            'reviewed_by': record.reviewed_by,
            'timestamp': record.updated_at.isoformat() if record.updated_at else None
        })
