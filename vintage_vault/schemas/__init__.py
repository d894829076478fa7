"""
Pydantic schemas for request validation
"""
from .api_schemas import (
    ForumReplyCreateRequest,
    ForumTopicCreateRequest,
    ModerationDecisionRequest,
    ModerationRuleCreateRequest,
    ModerationRuleUpdateRequest,
    ModerationSettingsUpdateRequest,
    ReviewDecision,
    RuleType,
)

__all__ = [
    'ModerationDecisionRequest',
    'ModerationSettingsUpdateRequest',
    'ModerationRuleCreateRequest',
    'ModerationRuleUpdateRequest',
    'ForumTopicCreateRequest',
    'ForumReplyCreateRequest',
    'ReviewDecision',
    'RuleType'
]
