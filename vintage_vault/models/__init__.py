from .forum_moderation import ModerationRecord
from .forum_reply import ForumReply
from .forum_topic import ForumTopic
from .moderation_rule import ModerationRule
from .moderation_settings import ModerationSettings
from .user import User

__all__ = ['User', 'ForumTopic', 'ForumReply', 'ModerationRule',
           'ModerationRecord', 'ModerationSettings']
