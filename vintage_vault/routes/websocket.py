import logging
import time
from typing import Any, Dict, Optional

from flask import request
from flask_login import current_user
from flask_socketio import disconnect, emit, join_room

from vintage_vault import socketio
from vintage_vault.models.user import User
from vintage_vault.services.database_service import db_service
from vintage_vault.services.moderation.websocket_notifier import MODERATORS_ROOM

logger = logging.getLogger(__name__)

# Rate limiting for WebSocket connections
_connection_attempts = {}
_MAX_ATTEMPTS_PER_MINUTE = 10


def _check_rate_limit(identifier: str) -> bool:
    """Check if connection attempts exceed rate limit"""
    current_time = time.time()
    minute_ago = current_time - 60

    _connection_attempts[identifier] = [
        attempt for attempt in _connection_attempts.get(identifier, [])
        if attempt > minute_ago
    ]

    if len(_connection_attempts[identifier]) >= _MAX_ATTEMPTS_PER_MINUTE:
        return False

    _connection_attempts[identifier].append(current_time)
    return True


def _connecting_user_id(auth: Optional[Dict[str, Any]]) -> Optional[str]:
    """User from the Authorization header, or from a token in the auth payload"""
    if current_user.is_authenticated:
        return current_user.id
    if isinstance(auth, dict) and isinstance(auth.get('token'), str):
        return User.user_id_from_token(auth['token'])
    return None


@socketio.on('connect')
def handle_connect(auth: Optional[Dict[str, Any]] = None) -> None:
    """Admins join the moderators room; everyone else is turned away"""
    client_ip = request.environ.get('REMOTE_ADDR', 'unknown')

    if not _check_rate_limit(client_ip):
        logger.warning(f"WebSocket connection rate limited for IP {client_ip}")
        emit('error', {'message': 'Too many connection attempts. Please try again later.'})
        disconnect()
        return

    user_id = _connecting_user_id(auth)
    if not user_id:
        logger.info(f"WebSocket connection rejected: unauthenticated client from IP {client_ip}")
        emit('error', {'message': 'Authentication required'})
        disconnect()
        return

    try:
        is_admin = db_service.is_admin(user_id)
    except Exception as e:
        logger.error(f"WebSocket admin lookup failed for {user_id}: {str(e)}")
        emit('error', {'message': 'Server error occurred'})
        disconnect()
        return

    if not is_admin:
        logger.info(f"WebSocket connection rejected: user {user_id} is not an admin")
        emit('error', {'message': 'Administrator access required'})
        disconnect()
        return

    join_room(MODERATORS_ROOM)
    logger.info(f"WebSocket connected: moderator {user_id}, session {request.sid}")
    emit('connected', {'message': 'Connected to Vintage Vault moderation', 'room': MODERATORS_ROOM})


@socketio.on('disconnect')
def handle_disconnect(*args) -> None:
    logger.info(f"WebSocket disconnected: session {request.sid}")
