"""
In-memory tracking of recovered moderation failures for the system endpoint
"""
import time
from collections import deque
from threading import Lock
from typing import Dict, List

ERROR_CATEGORIES = ('database', 'analysis', 'oracle', 'api', 'notification', 'other')


class ErrorTracker:
    """Track recent errors for monitoring and debugging"""

    # Shared across all instances
    _recent_errors = deque(maxlen=100)
    _error_counts = {category: 0 for category in ERROR_CATEGORIES}
    _lock = Lock()

    @classmethod
    def track_error(cls, error_type: str, message: str, content_id: str = None, details: Dict = None):
        """
        Record a failure that was handled without failing the request

        Args:
            error_type: One of ERROR_CATEGORIES, anything else counts as 'other'
            message: Error message
            content_id: Optional topic/reply/record id involved
            details: Optional additional details
        """
        category = error_type if error_type in cls._error_counts else 'other'
        with cls._lock:
            cls._recent_errors.append({
                'timestamp': time.time(),
                'type': category,
                'message': message,
                'content_id': content_id,
                'details': details or {}
            })
            cls._error_counts[category] += 1

    @classmethod
    def get_recent_errors(cls, limit: int = 50) -> List[Dict]:
        with cls._lock:
            errors = [dict(error) for error in list(cls._recent_errors)[-limit:]]

        now = time.time()
        for error in errors:
            seconds_ago = int(now - error['timestamp'])
            if seconds_ago < 60:
                error['time_ago'] = f"{seconds_ago}s ago"
            elif seconds_ago < 3600:
                error['time_ago'] = f"{seconds_ago // 60}m ago"
            else:
                error['time_ago'] = f"{seconds_ago // 3600}h ago"
        return errors

    @classmethod
    def get_error_stats(cls) -> Dict:
        """Totals, per-category counts and the last five minutes"""
        with cls._lock:
            five_min_ago = time.time() - 300
            return {
                'total_errors': sum(cls._error_counts.values()),
                'recent_errors': len(cls._recent_errors),
                'errors_last_5min': sum(1 for e in cls._recent_errors if e['timestamp'] > five_min_ago),
                'error_counts': cls._error_counts.copy()
            }

    @classmethod
    def reset(cls):
        with cls._lock:
            cls._recent_errors.clear()
            for category in cls._error_counts:
                cls._error_counts[category] = 0


error_tracker = ErrorTracker()
