"""
Pydantic schemas for API request validation
"""
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, StrictBool, validator


class RuleType(str, Enum):
    """Categories a moderation rule can belong to"""
    PROFANITY = "profanity"
    SPAM = "spam"
    HARASSMENT = "harassment"
    SPECIAL_REPLACEMENT = "special_replacement"


class ReviewDecision(str, Enum):
    """Decisions a reviewer can take on a pending record"""
    APPROVED = "approved"
    REJECTED = "rejected"
    MODIFIED = "modified"


class ModerationDecisionRequest(BaseModel):
    """Schema for review decisions"""
    decision: ReviewDecision = Field(..., description="Review outcome")
    notes: Optional[str] = Field(default=None, max_length=2000)
    modified_content: Optional[str] = Field(default=None, max_length=20000)

    class Config:
        extra = "forbid"
        json_schema_extra = {
            "example": {
                "decision": "modified",
                "notes": "Removed the link",
                "modified_content": "Lovely 1970s suede jacket, message me for details"
            }
        }


class ModerationSettingsUpdateRequest(BaseModel):
    """Partial update of the global moderation settings"""
    enabled: Optional[StrictBool] = None
    auto_moderate_safe: Optional[StrictBool] = None
    auto_remove_high_risk: Optional[StrictBool] = None
    toxicity_threshold: Optional[float] = None

    class Config:
        extra = "forbid"


class ModerationRuleCreateRequest(BaseModel):
    """Schema for new moderation rules"""
    rule_type: RuleType
    patterns: Union[List[str], str] = Field(..., description="List of patterns or newline separated text")
    severity: Optional[float] = None
    replacement_value: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=500)
    is_regex: bool = False

    class Config:
        extra = "forbid"
        json_schema_extra = {
            "example": {
                "rule_type": "spam",
                "patterns": ["free shipping worldwide", "dm for wholesale"],
                "severity": 0.6,
                "is_regex": False
            }
        }


class ModerationRuleUpdateRequest(BaseModel):
    """Partial update of a moderation rule"""
    rule_type: Optional[RuleType] = None
    patterns: Optional[Union[List[str], str]] = None
    severity: Optional[float] = None
    replacement_value: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=500)
    is_regex: Optional[bool] = None

    class Config:
        extra = "forbid"


class ForumTopicCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=20000)

    @validator('title')
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title cannot be empty or only whitespace')
        return v.strip()

    @validator('content')
    def validate_content(cls, v):
        if not v.strip():
            raise ValueError('Content cannot be empty or only whitespace')
        return v

    class Config:
        extra = "forbid"


class ForumReplyCreateRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=20000)

    @validator('content')
    def validate_content(cls, v):
        if not v.strip():
            raise ValueError('Content cannot be empty or only whitespace')
        return v

    class Config:
        extra = "forbid"
