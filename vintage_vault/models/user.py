import uuid
from datetime import datetime

from flask import current_app
from flask_login import UserMixin
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import generate_password_hash

from vintage_vault import db

TOKEN_SALT = 'vintage-vault-auth'


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True,
                   default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(80), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255))
    profile_picture = db.Column(db.String(500))
    is_admin = db.Column(db.Boolean, default=False)
    # Shadows UserMixin.is_active so deactivated accounts fail authentication
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def generate_auth_token(self):
        """Sign a bearer token for this user (normally issued by the auth service)"""
        serializer = URLSafeTimedSerializer(
            current_app.config['SECRET_KEY'], salt=TOKEN_SALT)
        return serializer.dumps({'user_id': self.id})

    @staticmethod
    def user_id_from_token(token):
        """Return the user id carried by a bearer token, or None if it is invalid or expired"""
        serializer = URLSafeTimedSerializer(
            current_app.config['SECRET_KEY'], salt=TOKEN_SALT)
        try:
            payload = serializer.loads(
                token, max_age=current_app.config.get('AUTH_TOKEN_MAX_AGE', 86400))
        except (SignatureExpired, BadSignature):
            return None
        return payload.get('user_id') if isinstance(payload, dict) else None

    def author_view(self):
        """Lightweight view embedded next to forum content"""
        return {
            'id': self.id,
            'name': self.name,
            'profile_picture': self.profile_picture
        }

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'profile_picture': self.profile_picture,
            'is_admin': self.is_admin,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat()
        }

    def __repr__(self):
        return f'<User {self.email}>'
