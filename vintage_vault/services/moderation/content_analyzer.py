"""
Rule based content analysis for forum text

Five independent passes run over every submission:

1. special replacements rewrite the working copy (no score, no issue)
2. profanity, first matching group only (+0.2)
3. high-priority spam, first matching group only (+0.4)
4. general spam, counts distinct matching patterns, needs at least two
   (+0.1 per match, counted up to five)
5. harassment, first matching group only (+0.3)

Passes 2-5 read the original content. Rules whose patterns failed to compile
are skipped and reported as warnings on the result.
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)

PROFANITY_SCORE = 0.2
HIGH_PRIORITY_SPAM_SCORE = 0.4
SPAM_SCORE_PER_MATCH = 0.1
SPAM_MATCH_CAP = 5
SPAM_MIN_MATCHES = 2
HARASSMENT_SCORE = 0.3

EXPLANATIONS = {
    'profanity': 'Your content contains language that may be considered inappropriate.',
    'spam': 'Your content contains patterns commonly found in spam.',
    'harassment': 'Your content contains language that may be considered hostile or harassing.',
}

FLAGGED_SUMMARY = 'Content flagged for potential policy violations'
CLEAN_SUMMARY = 'Content appears to be acceptable'


@dataclass
class Issue:
    type: str
    severity: float
    explanation: str

    def to_dict(self):
        return asdict(self)


@dataclass
class AnalysisWarning:
    """A non-fatal problem hit while analysing (bad rule, unavailable service)"""
    kind: str
    message: str
    rule_id: Optional[str] = None

    def to_dict(self):
        return asdict(self)


@dataclass
class AnalysisResult:
    is_flagged: bool
    moderation_score: float
    issues: List[Issue]
    modified_content: str
    summary: str
    warnings: List[AnalysisWarning] = field(default_factory=list)
    original_content: Optional[str] = field(default=None, repr=False)

    @property
    def has_special_replacements(self):
        return self.original_content is not None and self.modified_content != self.original_content

    def issues_as_dicts(self):
        return [issue.to_dict() for issue in self.issues]

    def to_dict(self):
        return {
            'is_flagged': self.is_flagged,
            'moderation_score': self.moderation_score,
            'issues': self.issues_as_dicts(),
            'modified_content': self.modified_content,
            'summary': self.summary,
            'warnings': [warning.to_dict() for warning in self.warnings]
        }


class ContentAnalyzer:
    """Classifies text against the cached rule set"""

    def __init__(self, rule_cache):
        self.rule_cache = rule_cache

    def analyze(self, content):
        snapshot = self.rule_cache.ensure_fresh()
        warnings = []
        issues = []
        score = 0.0

        modified_content = self.apply_special_replacements(
            content, snapshot.special_replacements, warnings)

        rule = self._first_matching_rule(content, snapshot.profanity, warnings)
        if rule:
            issues.append(self._issue('profanity', rule.severity))
            score += PROFANITY_SCORE

        rule = self._first_matching_rule(content, snapshot.high_priority_spam, warnings)
        if rule:
            issues.append(self._issue('spam', rule.severity))
            score += HIGH_PRIORITY_SPAM_SCORE

        match_count, max_severity = self._count_spam_matches(
            content, snapshot.spam, warnings)
        if match_count >= SPAM_MIN_MATCHES:
            issues.append(self._issue('spam', max_severity))
            score += SPAM_SCORE_PER_MATCH * min(match_count, SPAM_MATCH_CAP)

        rule = self._first_matching_rule(content, snapshot.harassment, warnings)
        if rule:
            issues.append(self._issue('harassment', rule.severity))
            score += HARASSMENT_SCORE

        score = round(min(score, 1.0), 4)
        is_flagged = len(issues) > 0

        return AnalysisResult(
            is_flagged=is_flagged,
            moderation_score=score,
            issues=issues,
            modified_content=modified_content,
            summary=FLAGGED_SUMMARY if is_flagged else CLEAN_SUMMARY,
            warnings=warnings,
            original_content=content
        )

    def apply_special_replacements(self, content, rules, warnings=None):
        """Substitute every special-replacement match in the working copy"""
        working_copy = content
        for rule in rules:
            if not self._usable(rule, warnings):
                continue
            for _, regex in rule.compiled_patterns:
                # Function replacement keeps backslashes in the value literal
                working_copy = regex.sub(
                    lambda _match, value=rule.replacement_value: value, working_copy)
        return working_copy

    def _first_matching_rule(self, content, rules, warnings):
        for rule in rules:
            if not self._usable(rule, warnings):
                continue
            for _, regex in rule.compiled_patterns:
                if regex.search(content):
                    return rule
        return None

    def _count_spam_matches(self, content, rules, warnings):
        matched_patterns = set()
        max_severity = 0.0
        for rule in rules:
            if not self._usable(rule, warnings):
                continue
            for pattern, regex in rule.compiled_patterns:
                if regex.search(content):
                    matched_patterns.add((pattern, rule.is_regex))
                    max_severity = max(max_severity, rule.severity)
        return len(matched_patterns), max_severity

    @staticmethod
    def _usable(rule, warnings):
        if rule.is_usable:
            return True
        if warnings is not None:
            logger.warning(f"Skipping rule {rule.id}: {rule.compile_error}")
            warnings.append(AnalysisWarning(
                kind='pattern', message=rule.compile_error, rule_id=rule.id))
        return False

    @staticmethod
    def _issue(issue_type, severity):
        return Issue(type=issue_type, severity=severity,
                     explanation=EXPLANATIONS[issue_type])
