import logging
import re
import time

from .errors import PatternError

logger = logging.getLogger(__name__)

HIGH_PRIORITY_SPAM_SEVERITY = 0.8


def compile_rule_pattern(pattern, is_regex, rule_id=None):
    """Compile one stored pattern; literal words match on word boundaries"""
    try:
        if is_regex:
            return re.compile(pattern, re.IGNORECASE)
        return re.compile(rf"\b{re.escape(pattern)}\b", re.IGNORECASE)
    except re.error as e:
        raise PatternError(f"Invalid pattern '{pattern}': {str(e)}",
                           rule_id=rule_id, pattern=pattern) from e


class CachedRule:
    """Simple data class to hold rule information without SQLAlchemy session dependencies"""

    def __init__(self, id, rule_type, patterns, severity, is_regex=False,
                 replacement_value=None, description=None):
        self.id = id
        self.rule_type = rule_type
        self.patterns = list(patterns)
        self.severity = severity
        self.is_regex = is_regex
        self.replacement_value = replacement_value
        self.description = description
        self.compiled_patterns = []
        self.compile_error = None

        for pattern in self.patterns:
            try:
                self.compiled_patterns.append(
                    (pattern, compile_rule_pattern(pattern, is_regex, rule_id=id)))
            except PatternError as e:
                # One bad pattern takes the whole rule out of service
                self.compile_error = e.message
                self.compiled_patterns = []
                logger.warning(f"Rule {id} disabled: {self.compile_error}")
                break

    @classmethod
    def from_model(cls, rule):
        return cls(rule.id, rule.rule_type, rule.patterns or [], rule.severity,
                   is_regex=bool(rule.is_regex),
                   replacement_value=rule.replacement_value,
                   description=rule.description)

    @property
    def is_usable(self):
        return self.compile_error is None

    def __repr__(self):
        return f"CachedRule(id={self.id}, type='{self.rule_type}', patterns={len(self.patterns)})"


class RuleSnapshot:
    """Rules grouped by category, built in full before it becomes visible"""

    def __init__(self, rules, last_refreshed):
        self.profanity = []
        self.spam = []
        self.high_priority_spam = []
        self.harassment = []
        self.special_replacements = []
        self.last_refreshed = last_refreshed

        for rule in rules:
            if rule.rule_type == 'profanity':
                self.profanity.append(rule)
            elif rule.rule_type == 'spam':
                if rule.severity >= HIGH_PRIORITY_SPAM_SEVERITY:
                    self.high_priority_spam.append(rule)
                else:
                    self.spam.append(rule)
            elif rule.rule_type == 'harassment':
                self.harassment.append(rule)
            elif rule.rule_type == 'special_replacement':
                self.special_replacements.append(rule)
            else:
                logger.warning(f"Ignoring rule {rule.id} with unknown type '{rule.rule_type}'")

    def counts(self):
        return {
            'profanity': len(self.profanity),
            'spam': len(self.spam),
            'high_priority_spam': len(self.high_priority_spam),
            'harassment': len(self.harassment),
            'special_replacements': len(self.special_replacements)
        }


class RuleCache:
    """Keeps a time-bounded snapshot of the rule store in memory.

    The loader returns an iterable of CachedRule (or ModerationRule rows) and
    the clock returns seconds; both are injectable so staleness can be
    simulated. Concurrent refreshes are tolerated: each one builds its own
    snapshot and the last assignment wins.
    """

    def __init__(self, loader, cache_ttl=3600, clock=time.monotonic):  # 1 hour default
        self._loader = loader
        self._cache_ttl = cache_ttl
        self._clock = clock
        self._snapshot = None
        self.refresh_count = 0

    @property
    def snapshot(self):
        return self._snapshot

    def is_stale(self):
        if self._snapshot is None:
            return True
        return self._clock() - self._snapshot.last_refreshed >= self._cache_ttl

    def ensure_fresh(self):
        """Reload from the rule store if the snapshot is missing or expired"""
        if not self.is_stale():
            return self._snapshot
        return self.force_refresh()

    def force_refresh(self):
        """Reload unconditionally and swap the snapshot in one assignment"""
        rules = [
            rule if isinstance(rule, CachedRule) else CachedRule.from_model(rule)
            for rule in self._loader()
        ]
        snapshot = RuleSnapshot(rules, self._clock())
        self._snapshot = snapshot
        self.refresh_count += 1
        logger.info(f"Rule cache refreshed: {snapshot.counts()}")
        return snapshot

    def invalidate_cache(self):
        self._snapshot = None

    def get_cache_stats(self):
        """Get cache statistics for monitoring"""
        if self._snapshot is None:
            return {'populated': False, 'refresh_count': self.refresh_count,
                    'age_seconds': None, 'rules': {}}

        broken = [
            rule.id for bucket in (self._snapshot.profanity, self._snapshot.spam,
                                   self._snapshot.high_priority_spam,
                                   self._snapshot.harassment,
                                   self._snapshot.special_replacements)
            for rule in bucket if not rule.is_usable
        ]
        return {
            'populated': True,
            'refresh_count': self.refresh_count,
            'age_seconds': self._clock() - self._snapshot.last_refreshed,
            'ttl_seconds': self._cache_ttl,
            'rules': self._snapshot.counts(),
            'broken_rules': broken
        }
