from flask import current_app

from .ai.rewrite_oracle import RewriteOracle
from .database_service import db_service
from .moderation.content_analyzer import ContentAnalyzer
from .moderation.improvement_suggester import ImprovementSuggester
from .moderation.record_manager import ModerationRecordManager
from .moderation.rule_cache import RuleCache
from .moderation.settings_store import ModerationSettingsStore
from .moderation.websocket_notifier import WebSocketNotifier

EXTENSION_KEY = 'content_moderation'


class ContentModerator:
    """Wires the moderation components together for one application"""

    def __init__(self, app=None, socketio=None):
        self.rule_cache = None
        self.analyzer = None
        self.settings_store = None
        self.record_manager = None
        self.suggester = None
        if app is not None:
            self.init_app(app, socketio)

    def init_app(self, app, socketio=None):
        self.rule_cache = RuleCache(
            db_service.get_all_moderation_rules,
            cache_ttl=app.config.get('RULE_CACHE_TTL', 3600))
        self.analyzer = ContentAnalyzer(self.rule_cache)
        self.settings_store = ModerationSettingsStore(db_service)
        self.record_manager = ModerationRecordManager(
            db_service, notifier=WebSocketNotifier(socketio))

        with app.app_context():
            oracle = RewriteOracle()
        if oracle.is_configured():
            app.logger.info(
                f"Rewrite oracle enabled ({', '.join(p.name for p in oracle.providers)})")
        else:
            oracle = None
            app.logger.info("No rewrite provider configured, using substitution suggestions")
        self.suggester = ImprovementSuggester(self.rule_cache, db_service, oracle=oracle)

        app.extensions[EXTENSION_KEY] = self

    def analyze(self, content):
        return self.analyzer.analyze(content)


def get_moderator():
    """The ContentModerator of the current application"""
    return current_app.extensions[EXTENSION_KEY]
