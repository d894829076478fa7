import uuid

from vintage_vault import db

from .moderated_content import ModeratedContentMixin


class ForumReply(ModeratedContentMixin, db.Model):
    __tablename__ = 'forum_replies'

    id = db.Column(db.String(36), primary_key=True,
                   default=lambda: str(uuid.uuid4()))
    topic_id = db.Column(db.String(36), db.ForeignKey(
        'forum_topics.id'), nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'topic_id': self.topic_id,
            'author': self.author.author_view() if self.author else None,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
            **self.moderation_fields()
        }

    def __repr__(self):
        return f'<ForumReply {self.id}>'
