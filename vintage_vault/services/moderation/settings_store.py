import logging

from .errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    'enabled': True,
    'auto_moderate_safe': True,
    'auto_remove_high_risk': False,
    'toxicity_threshold': 0.7,
}

BOOLEAN_SETTINGS = ('enabled', 'auto_moderate_safe', 'auto_remove_high_risk')


class ModerationSettingsStore:
    """Reads and writes the singleton settings row"""

    def __init__(self, db_service):
        self.db_service = db_service

    def get(self):
        settings = self.db_service.get_moderation_settings()
        if settings is None:
            logger.info("No moderation settings stored, creating defaults")
            settings = self.db_service.save_moderation_settings(dict(DEFAULT_SETTINGS))
        return settings

    def update(self, partial):
        """Validate a partial update, then create or update the singleton"""
        unknown = sorted(set(partial) - set(DEFAULT_SETTINGS))
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(unknown)}",
                                  details={'allowed_settings': list(DEFAULT_SETTINGS)})

        values = {}
        for key in BOOLEAN_SETTINGS:
            if key in partial:
                if not isinstance(partial[key], bool):
                    raise ValidationError(f"'{key}' must be true or false")
                values[key] = partial[key]

        if 'toxicity_threshold' in partial:
            threshold = partial['toxicity_threshold']
            if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) \
                    or not 0 <= threshold <= 1:
                raise ValidationError('Toxicity threshold must be between 0 and 1')
            values['toxicity_threshold'] = float(threshold)

        if self.db_service.get_moderation_settings() is None:
            values = {**DEFAULT_SETTINGS, **values}

        settings = self.db_service.save_moderation_settings(values)
        logger.info(f"Moderation settings updated: {sorted(values)}")
        return settings
