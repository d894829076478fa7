"""Global moderation settings (singleton row)."""
from datetime import datetime

from vintage_vault import db


class ModerationSettings(db.Model):
    """Store the moderation switches and thresholds."""
    __tablename__ = 'moderation_settings'

    id = db.Column(db.Integer, primary_key=True)
    enabled = db.Column(db.Boolean, nullable=False, default=True)
    auto_moderate_safe = db.Column(db.Boolean, nullable=False, default=True)
    auto_remove_high_risk = db.Column(db.Boolean, nullable=False, default=False)
    toxicity_threshold = db.Column(db.Float, nullable=False, default=0.7)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'enabled': self.enabled,
            'auto_moderate_safe': self.auto_moderate_safe,
            'auto_remove_high_risk': self.auto_remove_high_risk,
            'toxicity_threshold': self.toxicity_threshold,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }

    def __repr__(self):
        return f'<ModerationSettings enabled={self.enabled} threshold={self.toxicity_threshold}>'
