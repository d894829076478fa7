"""
Centralized Database Service Layer for Vintage Vault moderation
Database operations with consistent error handling
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from vintage_vault import db
from vintage_vault.models.forum_moderation import CONTENT_TYPES, RECORD_STATUSES, ModerationRecord
from vintage_vault.models.forum_reply import ForumReply
from vintage_vault.models.forum_topic import ForumTopic
from vintage_vault.models.moderation_rule import ModerationRule, validate_rule_definition
from vintage_vault.models.moderation_settings import ModerationSettings
from vintage_vault.models.user import User
from vintage_vault.services.error_tracker import error_tracker
from vintage_vault.services.moderation.errors import NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

CONTENT_MODELS = {
    'topic': ForumTopic,
    'reply': ForumReply,
}


class DatabaseService:
    """Centralized database operations with consistent error handling"""

    def _safe_execute(self, operation_func, *args, **kwargs):
        """Run a database operation, rolling back and raising StoreError on failure"""
        try:
            return operation_func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"Database error in {operation_func.__name__}: {str(e)}")
            error_tracker.track_error('database', str(e),
                                      details={'operation': operation_func.__name__})
            db.session.rollback()
            raise StoreError('Moderation store unavailable') from e

    # User Operations
    def create_user(self, name: str, email: str, password: Optional[str] = None,
                    is_admin: bool = False, profile_picture: Optional[str] = None) -> User:
        """Create a new user"""
        def _create_user():
            user = User(name=name, email=email, is_admin=is_admin,
                        profile_picture=profile_picture)
            if password:
                user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user

        return self._safe_execute(_create_user)

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        def _get_user():
            return db.session.get(User, user_id)

        return self._safe_execute(_get_user)

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        def _get_user():
            return User.query.filter_by(email=email).first()

        return self._safe_execute(_get_user)

    def is_admin(self, user_id: str) -> bool:
        """Identity lookup used to gate the moderation admin surface"""
        user = self.get_user_by_id(user_id)
        return bool(user and user.is_active and user.is_admin)

    # Rule Store Operations
    def count_moderation_rules(self) -> int:
        def _count():
            return ModerationRule.query.count()

        return self._safe_execute(_count)

    def get_all_moderation_rules(self) -> List[ModerationRule]:
        """All rules in creation order (pattern order inside a rule is kept)"""
        def _get_rules():
            return ModerationRule.query.order_by(
                ModerationRule.created_at.asc(), ModerationRule.id.asc()).all()

        return self._safe_execute(_get_rules)

    def get_moderation_rule(self, rule_id: str) -> Optional[ModerationRule]:
        def _get_rule():
            return db.session.get(ModerationRule, rule_id)

        return self._safe_execute(_get_rule)

    def create_moderation_rule(self, rule_type: str, patterns: List[str],
                               severity: Optional[float] = None,
                               replacement_value: Optional[str] = None,
                               description: Optional[str] = None,
                               is_regex: bool = False) -> ModerationRule:
        """Validate and store a new rule"""
        patterns, severity = validate_rule_definition(
            rule_type, patterns, severity, replacement_value)

        def _create_rule():
            rule = ModerationRule(
                rule_type=rule_type,
                patterns=patterns,
                severity=severity,
                replacement_value=replacement_value,
                description=description,
                is_regex=is_regex
            )
            db.session.add(rule)
            db.session.commit()
            return rule

        return self._safe_execute(_create_rule)

    def update_moderation_rule(self, rule_id: str, **changes) -> ModerationRule:
        """Apply a partial update to a rule, re-validating the merged definition"""
        rule = self.get_moderation_rule(rule_id)
        if not rule:
            raise NotFoundError('Moderation rule not found')

        merged = {
            'rule_type': rule.rule_type,
            'patterns': rule.patterns,
            'severity': rule.severity,
            'replacement_value': rule.replacement_value,
        }
        merged.update({k: v for k, v in changes.items() if k in merged})
        patterns, severity = validate_rule_definition(
            merged['rule_type'], merged['patterns'], merged['severity'],
            merged['replacement_value'])

        def _update_rule():
            rule.rule_type = merged['rule_type']
            rule.patterns = patterns
            rule.severity = severity
            rule.replacement_value = merged['replacement_value']
            if 'description' in changes:
                rule.description = changes['description']
            if 'is_regex' in changes:
                rule.is_regex = bool(changes['is_regex'])
            db.session.commit()
            return rule

        return self._safe_execute(_update_rule)

    # Settings Operations
    def get_moderation_settings(self) -> Optional[ModerationSettings]:
        def _get_settings():
            return ModerationSettings.query.order_by(ModerationSettings.id.asc()).first()

        return self._safe_execute(_get_settings)

    def save_moderation_settings(self, values: Dict[str, Any]) -> ModerationSettings:
        """Create the singleton row or update it in place"""
        def _save_settings():
            settings = ModerationSettings.query.order_by(ModerationSettings.id.asc()).first()
            if settings is None:
                settings = ModerationSettings()
                db.session.add(settings)
            for key, value in values.items():
                setattr(settings, key, value)
            db.session.commit()
            return settings

        return self._safe_execute(_save_settings)

    # Forum Content Operations
    def create_forum_topic(self, author_id: str, title: str, content: str,
                           has_special_replacements: bool = False) -> ForumTopic:
        def _create_topic():
            topic = ForumTopic(author_id=author_id, title=title, content=content,
                               has_special_replacements=has_special_replacements)
            db.session.add(topic)
            db.session.commit()
            return topic

        return self._safe_execute(_create_topic)

    def create_forum_reply(self, topic_id: str, author_id: str, content: str,
                           has_special_replacements: bool = False) -> ForumReply:
        def _create_reply():
            reply = ForumReply(topic_id=topic_id, author_id=author_id, content=content,
                               has_special_replacements=has_special_replacements)
            db.session.add(reply)
            db.session.commit()
            return reply

        return self._safe_execute(_create_reply)

    def get_forum_topic(self, topic_id: str) -> Optional[ForumTopic]:
        def _get_topic():
            return db.session.get(ForumTopic, topic_id)

        return self._safe_execute(_get_topic)

    def get_content_entity(self, content_type: str, content_id: str, fresh: bool = False):
        """Generic get-by-id for topics and replies"""
        model = CONTENT_MODELS.get(content_type)
        if model is None:
            raise ValidationError(f"Unknown content type '{content_type}'",
                                  details={'allowed_types': list(CONTENT_TYPES)})

        def _get_entity():
            return db.session.get(model, content_id, populate_existing=fresh)

        return self._safe_execute(_get_entity)

    def update_content_moderation_state(self, content_type: str, content_id: str,
                                        **fields) -> None:
        entity = self.get_content_entity(content_type, content_id)
        if entity is None:
            raise NotFoundError(f"{content_type.title()} not found")

        def _update_entity():
            for key, value in fields.items():
                setattr(entity, key, value)
            db.session.commit()

        self._safe_execute(_update_entity)

    # Moderation Record Operations
    def create_moderation_record(self, content_type: str, content_id: str,
                                 original_content: str, moderation_score: float,
                                 issues: List[Dict[str, Any]],
                                 content_fields: Optional[Dict[str, Any]] = None) -> ModerationRecord:
        """Store a pending record, optionally updating the content in the same commit"""
        def _create_record():
            record = ModerationRecord(
                content_type=content_type,
                content_id=content_id,
                original_content=original_content,
                moderation_score=moderation_score,
                is_flagged=True,
                issues=issues,
                status='pending'
            )
            db.session.add(record)
            if content_fields:
                entity = db.session.get(CONTENT_MODELS[content_type], content_id)
                if entity is not None:
                    for key, value in content_fields.items():
                        setattr(entity, key, value)
            db.session.commit()
            return record

        return self._safe_execute(_create_record)

    def get_moderation_record(self, moderation_id: str) -> Optional[ModerationRecord]:
        def _get_record():
            return db.session.get(ModerationRecord, moderation_id)

        return self._safe_execute(_get_record)

    def apply_review_decision(self, record: ModerationRecord, status: str,
                              reviewer_id: str, review_note: str,
                              suggested_improvement: Optional[str],
                              content_fields: Dict[str, Any]) -> None:
        """Write the record transition and the content update as one commit"""
        def _apply_decision():
            record.status = status
            record.review_note = review_note
            record.reviewed_by = reviewer_id
            if suggested_improvement is not None:
                record.suggested_improvement = suggested_improvement

            entity = db.session.get(CONTENT_MODELS[record.content_type], record.content_id)
            if entity is None:
                db.session.rollback()
                raise NotFoundError(f"{record.content_type.title()} not found")
            for key, value in content_fields.items():
                setattr(entity, key, value)
            db.session.commit()

        self._safe_execute(_apply_decision)

    def save_suggested_improvement(self, record: ModerationRecord, suggestion: str) -> None:
        def _save_suggestion():
            record.suggested_improvement = suggestion
            db.session.commit()

        self._safe_execute(_save_suggestion)

    def get_pending_records(self) -> List[ModerationRecord]:
        """Worst-first triage order"""
        def _get_pending():
            return ModerationRecord.query.filter_by(status='pending').order_by(
                ModerationRecord.moderation_score.desc(),
                ModerationRecord.created_at.desc()
            ).all()

        return self._safe_execute(_get_pending)

    def get_recent_records(self, limit: int = 10) -> List[ModerationRecord]:
        def _get_recent():
            return ModerationRecord.query.order_by(
                ModerationRecord.updated_at.desc()).limit(limit).all()

        return self._safe_execute(_get_recent)

    def get_record_counts_by_status(self) -> Dict[str, int]:
        """Get record counts grouped by status"""
        def _get_counts():
            rows = db.session.query(
                ModerationRecord.status, func.count(ModerationRecord.id)
            ).group_by(ModerationRecord.status).all()

            counts = {status: 0 for status in RECORD_STATUSES}
            for status, count in rows:
                counts[status] = count
            counts['total'] = sum(count for _, count in rows)
            return counts

        return self._safe_execute(_get_counts)

    def get_average_moderation_score(self) -> Optional[float]:
        def _get_average():
            return db.session.query(func.avg(ModerationRecord.moderation_score)).scalar()

        return self._safe_execute(_get_average)

    def get_issue_type_counts(self) -> List[tuple]:
        """Issue-type histogram across all records, most frequent first"""
        def _get_issue_counts():
            counter = Counter()
            for (issues,) in db.session.query(ModerationRecord.issues).all():
                for issue in issues or []:
                    counter[issue.get('type', 'other')] += 1
            return counter.most_common()

        return self._safe_execute(_get_issue_counts)


# Singleton instance
db_service = DatabaseService()
