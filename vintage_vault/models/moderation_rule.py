import uuid
from datetime import datetime

from vintage_vault import db
from vintage_vault.services.moderation.errors import ValidationError

RULE_TYPES = ('profanity', 'spam', 'harassment', 'special_replacement')

# Applied at ingestion when a rule arrives without a severity
DEFAULT_SEVERITIES = {
    'profanity': 0.7,
    'spam': 0.6,
    'harassment': 0.8,
    'special_replacement': 0.0,
}


def validate_rule_definition(rule_type, patterns, severity=None,
                             replacement_value=None):
    """
    Validate a rule before it is stored and resolve its severity

    Returns:
        tuple: (cleaned patterns, severity)
    """
    if rule_type not in RULE_TYPES:
        raise ValidationError(
            f"Unknown rule type '{rule_type}'",
            details={'allowed_types': list(RULE_TYPES)})

    if isinstance(patterns, str):
        patterns = [line.strip() for line in patterns.split('\n')]
    cleaned = [p for p in (patterns or []) if isinstance(p, str) and p.strip()]
    if not cleaned:
        raise ValidationError('A moderation rule needs at least one pattern')

    if severity is None:
        severity = DEFAULT_SEVERITIES[rule_type]
    if not isinstance(severity, (int, float)) or isinstance(severity, bool) \
            or not 0 <= severity <= 1:
        raise ValidationError('Severity must be a number between 0 and 1')

    if rule_type == 'special_replacement' and not replacement_value:
        raise ValidationError(
            'Special replacement rules require a replacement value')

    return cleaned, float(severity)


class ModerationRule(db.Model):
    __tablename__ = 'moderation_rules'

    id = db.Column(db.String(36), primary_key=True,
                   default=lambda: str(uuid.uuid4()))
    # profanity, spam, harassment, special_replacement
    rule_type = db.Column(db.String(30), nullable=False, index=True)
    # Ordered list of literal words or regular expressions
    patterns = db.Column(db.JSON, nullable=False)
    severity = db.Column(db.Float, nullable=False, default=0.5)
    replacement_value = db.Column(db.String(255))
    description = db.Column(db.Text)
    is_regex = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'rule_type': self.rule_type,
            'patterns': self.patterns,
            'severity': self.severity,
            'replacement_value': self.replacement_value,
            'description': self.description,
            'is_regex': self.is_regex,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat()
        }

    def __repr__(self):
        return f'<ModerationRule {self.rule_type} ({len(self.patterns or [])} patterns)>'
