"""
Identity checks for the moderation API
"""
from functools import wraps

from flask_login import current_user

from vintage_vault.services.database_service import db_service
from vintage_vault.services.moderation.errors import PermissionDeniedError
from vintage_vault.utils.error_handlers import APIError, api_error_response


def bearer_token(request):
    """Token from an 'Authorization: Bearer <token>' header, or None"""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def login_required_json(f):
    """Reject anonymous requests with a JSON 401"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return api_error_response('Authentication required', 401, 'AUTH_REQUIRED')
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """
    Require an authenticated administrator

    Anonymous callers get 401; authenticated non-admins get 403.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return api_error_response('Authentication required', 401, 'AUTH_REQUIRED')

        try:
            if not db_service.is_admin(current_user.id):
                raise PermissionDeniedError('Administrator access required')
        except APIError as e:
            return api_error_response(e.message, e.status_code, e.error_code)

        return f(*args, **kwargs)
    return decorated_function
