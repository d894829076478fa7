import uuid
from datetime import datetime

from vintage_vault import db

CONTENT_TYPES = ('topic', 'reply')
# pending is the only non-terminal status
RECORD_STATUSES = ('pending', 'approved', 'rejected', 'modified')


class ModerationRecord(db.Model):
    __tablename__ = 'forum_moderations'

    id = db.Column(db.String(36), primary_key=True,
                   default=lambda: str(uuid.uuid4()))
    content_type = db.Column(db.String(10), nullable=False)  # topic, reply
    content_id = db.Column(db.String(36), nullable=False, index=True)
    original_content = db.Column(db.Text, nullable=False)
    moderation_score = db.Column(db.Float, nullable=False, default=0.0)
    is_flagged = db.Column(db.Boolean, nullable=False, default=True)
    # [{type, severity, explanation}, ...]
    issues = db.Column(db.JSON, nullable=False, default=list)
    status = db.Column(db.String(20), nullable=False,
                       default='pending', index=True)
    reviewed_by = db.Column(db.String(36), db.ForeignKey('users.id'))
    review_note = db.Column(db.Text)
    suggested_improvement = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    reviewer = db.relationship('User', foreign_keys=[reviewed_by])

    @property
    def issue_types(self):
        return [issue.get('type') for issue in (self.issues or [])]

    def to_dict(self):
        return {
            'id': self.id,
            'content_type': self.content_type,
            'content_id': self.content_id,
            'original_content': self.original_content,
            'moderation_score': self.moderation_score,
            'is_flagged': self.is_flagged,
            'issues': self.issues or [],
            'status': self.status,
            'reviewed_by': self.reviewed_by,
            'review_note': self.review_note,
            'suggested_improvement': self.suggested_improvement,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat()
        }

    def __repr__(self):
        return f'<ModerationRecord {self.content_type}:{self.content_id} {self.status}>'
