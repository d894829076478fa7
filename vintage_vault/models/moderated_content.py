from datetime import datetime

from sqlalchemy.orm import declared_attr

from vintage_vault import db


class ModeratedContentMixin:
    """Columns shared by forum topics and replies.

    ``visible``, ``pending_moderation`` and ``moderation_status`` are written
    only by the moderation record manager.
    """

    content = db.Column(db.Text, nullable=False)
    visible = db.Column(db.Boolean, default=True, nullable=False)
    pending_moderation = db.Column(db.Boolean, default=False, nullable=False)
    # None until moderated, then pending, approved or rejected
    moderation_status = db.Column(db.String(20))
    has_special_replacements = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @declared_attr
    def author_id(cls):
        return db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)

    @declared_attr
    def author(cls):
        return db.relationship('User', lazy='joined')

    def moderation_fields(self):
        return {
            'content': self.content,
            'visible': self.visible,
            'pending_moderation': self.pending_moderation,
            'moderation_status': self.moderation_status,
            'has_special_replacements': self.has_special_replacements,
        }
