from flask import current_app

from .decisions import parse_decision
from .errors import NotFoundError, ValidationError

REPORT_TEMPLATE = """Moderation Report
----------------
Total content moderated: {total}
Content pending review: {pending}
Content approved: {approved}
Content rejected: {rejected}
Content modified: {modified}
Average moderation score: {average_score}

Issues breakdown:
{issues}"""


class ModerationRecordManager:
    """Owns the moderation record lifecycle and the moderation fields of forum content"""

    def __init__(self, db_service, notifier=None):
        self.db_service = db_service
        self.notifier = notifier

    def record_if_flagged(self, content_type, content_id, analysis, content_fields=None):
        """
        Persist a pending record for flagged content; no-op otherwise

        content_fields are written onto the content entity in the same commit.
        """
        if not analysis.is_flagged:
            return None

        record = self.db_service.create_moderation_record(
            content_type, content_id,
            original_content=analysis.original_content,
            moderation_score=analysis.moderation_score,
            issues=analysis.issues_as_dicts(),
            content_fields=content_fields)
        current_app.logger.info(f"Moderation saved for {content_type} {content_id}")
        return record

    def record_submission(self, content_type, content_id, analysis, settings):
        """
        Apply the submission-time outcome of an analysis to freshly created content

        Flagged content gets a pending record and is marked pending, and is
        hidden when high risk removal is on and the score reaches the
        threshold. Clean content is marked approved when safe content is
        auto-moderated.
        """
        if analysis is None:
            return None

        if not analysis.is_flagged:
            if settings.auto_moderate_safe:
                self.db_service.update_content_moderation_state(
                    content_type, content_id, moderation_status='approved')
            return None

        content_fields = {'pending_moderation': True, 'moderation_status': 'pending'}
        if settings.auto_remove_high_risk and \
                analysis.moderation_score >= settings.toxicity_threshold:
            content_fields['visible'] = False

        record = self.record_if_flagged(content_type, content_id, analysis,
                                        content_fields=content_fields)
        current_app.logger.info(
            f"{content_type.title()} {content_id} queued for review "
            f"(score {analysis.moderation_score}, hidden={not content_fields.get('visible', True)})")

        if self.notifier:
            self.notifier.send_record_queued(record)
        return record

    def get_record(self, moderation_id):
        record = self.db_service.get_moderation_record(moderation_id)
        if record is None:
            raise NotFoundError('Moderation entry not found')
        return record

    def apply_decision(self, moderation_id, decision, reviewer_id, notes=None,
                       modified_content=None):
        """Review a record and return the re-read content entity"""
        record = self.get_record(moderation_id)
        decision = parse_decision(decision, modified_content)

        if record.status != 'pending' and record.status != decision.status:
            raise ValidationError(
                f"Moderation entry already {record.status}",
                error_code='RECORD_ALREADY_REVIEWED',
                details={'status': record.status})

        update = decision.content_update()
        content_fields = {
            'visible': update.visible,
            'pending_moderation': update.pending_moderation,
            'moderation_status': update.moderation_status,
        }
        if update.content is not None:
            content_fields['content'] = update.content

        self.db_service.apply_review_decision(
            record, decision.status, reviewer_id,
            review_note=notes or '',
            suggested_improvement=decision.replacement,
            content_fields=content_fields)

        entity = self.db_service.get_content_entity(
            record.content_type, record.content_id, fresh=True)
        if entity is None:
            raise NotFoundError(f"{record.content_type.title()} not found")

        content = entity.to_dict()
        current_app.logger.info(
            f"Moderation {record.id} {decision.status} by {reviewer_id}")
        if self.notifier:
            self.notifier.send_decision(record, content)
        return content

    def list_pending(self):
        """Pending records, worst first, each with its content and author"""
        pending = []
        for record in self.db_service.get_pending_records():
            item = record.to_dict()
            entity = self.db_service.get_content_entity(record.content_type, record.content_id)
            item['content'] = entity.to_dict() if entity else None
            pending.append(item)
        return pending

    def build_report(self):
        counts = self.db_service.get_record_counts_by_status()
        average = self.db_service.get_average_moderation_score()
        issue_counts = self.db_service.get_issue_type_counts()

        return REPORT_TEMPLATE.format(
            total=counts['total'],
            pending=counts['pending'],
            approved=counts['approved'],
            rejected=counts['rejected'],
            modified=counts['modified'],
            average_score=f"{average * 100:.1f}%" if average is not None else 'N/A',
            issues='\n'.join(
                f"- {issue_type}: {count} occurrences" for issue_type, count in issue_counts)
        )

    def find_recent_activity(self, limit=10):
        activity = []
        for record in self.db_service.get_recent_records(limit):
            item = record.to_dict()
            item['reviewer_name'] = record.reviewer.name if record.reviewer else None
            activity.append(item)
        return activity
