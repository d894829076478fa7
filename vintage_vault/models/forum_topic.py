import uuid

from vintage_vault import db

from .moderated_content import ModeratedContentMixin


class ForumTopic(ModeratedContentMixin, db.Model):
    __tablename__ = 'forum_topics'

    id = db.Column(db.String(36), primary_key=True,
                   default=lambda: str(uuid.uuid4()))
    title = db.Column(db.String(200), nullable=False)
    is_pinned = db.Column(db.Boolean, default=False)
    is_locked = db.Column(db.Boolean, default=False)

    replies = db.relationship(
        'ForumReply', backref='topic', lazy=True, cascade='all, delete-orphan',
        order_by='ForumReply.created_at')

    def to_dict(self, include_replies=False):
        data = {
            'id': self.id,
            'title': self.title,
            'author': self.author.author_view() if self.author else None,
            'is_pinned': self.is_pinned,
            'is_locked': self.is_locked,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
            **self.moderation_fields()
        }
        if include_replies:
            data['replies'] = [reply.to_dict() for reply in self.replies if reply.visible]
        return data

    def __repr__(self):
        return f'<ForumTopic {self.title}>'
