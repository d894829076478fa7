"""
Review decisions and the content updates they produce

Every transition of a moderation record lives here: the decision a reviewer
takes maps to exactly one record status and one update of the forum content.
"""
from dataclasses import dataclass
from typing import Optional

from .errors import ValidationError


@dataclass(frozen=True)
class ContentUpdate:
    visible: bool
    pending_moderation: bool
    moderation_status: str
    content: Optional[str] = None


@dataclass(frozen=True)
class Approved:
    replacement: Optional[str] = None

    status = 'approved'

    def content_update(self):
        return ContentUpdate(visible=True, pending_moderation=False,
                             moderation_status='approved', content=self.replacement)


@dataclass(frozen=True)
class Rejected:
    replacement: Optional[str] = None

    status = 'rejected'

    def content_update(self):
        return ContentUpdate(visible=False, pending_moderation=False,
                             moderation_status='rejected', content=self.replacement)


@dataclass(frozen=True)
class Modified:
    replacement: str

    status = 'modified'

    def content_update(self):
        # Edited content goes live as approved
        return ContentUpdate(visible=True, pending_moderation=False,
                             moderation_status='approved', content=self.replacement)


DECISIONS = {
    'approved': Approved,
    'rejected': Rejected,
    'modified': Modified,
}


def parse_decision(decision, modified_content=None):
    """Build a decision from request values, rejecting incomplete ones"""
    decision_class = DECISIONS.get(decision)
    if decision_class is None:
        raise ValidationError(
            f"Invalid decision '{decision}'",
            details={'allowed_decisions': list(DECISIONS)})

    if modified_content is not None and not modified_content.strip():
        modified_content = None

    if decision_class is Modified and modified_content is None:
        raise ValidationError(
            "Modified content is required for a 'modified' decision",
            error_code='MISSING_MODIFIED_CONTENT')

    return decision_class(modified_content)
