"""
Rewrite suggestions for flagged content

The first suggestion computed for a record is stored on it and returned as is
from then on. With a rewrite oracle configured the oracle is asked; otherwise
fixed per-category substitutions are applied.
"""
import re

from flask import current_app

from vintage_vault.services.error_tracker import error_tracker

from .content_analyzer import ContentAnalyzer
from .errors import OracleError, ValidationError

SPAM_REWRITES = [
    (re.compile(r"\b(www|http)[^\s]+", re.IGNORECASE), "[link removed]"),
    (re.compile(r"\b\d+% off\b", re.IGNORECASE), "discount"),
    (re.compile(r"buy now", re.IGNORECASE), "consider purchasing"),
    (re.compile(r"limited time offer", re.IGNORECASE), "available for a limited period"),
]

HARASSMENT_TEMPLATE = (
    "I'd like to express my disagreement in a respectful way. "
    "I understand you may have a different perspective, and I'd appreciate further discussion."
)


def mask_match(match):
    return '*' * len(match.group(0))


class ImprovementSuggester:

    def __init__(self, rule_cache, db_service, oracle=None):
        self.rule_cache = rule_cache
        self.db_service = db_service
        self.oracle = oracle
        self.analyzer = ContentAnalyzer(rule_cache)

    def suggest(self, record):
        if record.suggested_improvement is not None:
            return record.suggested_improvement

        if not record.issues:
            raise ValidationError('Moderation entry has no issues to improve',
                                  error_code='NO_ISSUES')
        if not record.original_content:
            raise ValidationError('Moderation entry has no content to improve',
                                  error_code='NO_CONTENT')

        if self.oracle is not None:
            suggestion = self._oracle_rewrite(record)
        else:
            suggestion = self.deterministic_rewrite(record.original_content, record.issue_types)

        self.db_service.save_suggested_improvement(record, suggestion)
        return suggestion

    def _oracle_rewrite(self, record):
        """Oracle output if it changed anything, the original content otherwise"""
        original = record.original_content
        try:
            rewritten = self.oracle.rewrite(original, record.issues)
        except OracleError as e:
            current_app.logger.warning(f"Rewrite oracle failed for {record.id}: {e.message}")
            error_tracker.track_error('oracle', e.message, content_id=record.id,
                                      details=e.details)
            return original
        except Exception as e:
            current_app.logger.error(f"Unexpected rewrite oracle error for {record.id}: {str(e)}")
            error_tracker.track_error('oracle', str(e), content_id=record.id)
            return original

        if not rewritten or rewritten == original:
            return original
        return rewritten

    def deterministic_rewrite(self, content, issue_types):
        snapshot = self.rule_cache.ensure_fresh()
        suggestion = self.analyzer.apply_special_replacements(
            content, snapshot.special_replacements)

        if 'profanity' in issue_types:
            for rule in snapshot.profanity:
                if not rule.is_usable:
                    continue
                for _, regex in rule.compiled_patterns:
                    suggestion = regex.sub(mask_match, suggestion)

        if 'spam' in issue_types:
            for regex, replacement in SPAM_REWRITES:
                suggestion = regex.sub(replacement, suggestion)

        if 'harassment' in issue_types:
            suggestion = HARASSMENT_TEMPLATE

        return suggestion
