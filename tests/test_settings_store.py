import pytest

from vintage_vault import db
from vintage_vault.models.moderation_settings import ModerationSettings
from vintage_vault.services.database_service import db_service
from vintage_vault.services.moderation.errors import ValidationError
from vintage_vault.services.moderation.settings_store import ModerationSettingsStore


@pytest.fixture
def store(ctx):
    ModerationSettings.query.delete()
    db.session.commit()
    return ModerationSettingsStore(db_service)


def test_get_creates_defaults(store):
    settings = store.get()

    assert settings.enabled is True
    assert settings.auto_moderate_safe is True
    assert settings.auto_remove_high_risk is False
    assert settings.toxicity_threshold == 0.7
    assert ModerationSettings.query.count() == 1


def test_get_returns_the_singleton(store):
    first = store.get()
    second = store.get()

    assert first.id == second.id
    assert ModerationSettings.query.count() == 1


def test_update_creates_row_with_defaults_for_missing_values(store):
    settings = store.update({'toxicity_threshold': 0.5})

    assert settings.toxicity_threshold == 0.5
    assert settings.enabled is True
    assert settings.auto_remove_high_risk is False


def test_partial_update_keeps_other_values(store):
    store.update({'auto_remove_high_risk': True})
    settings = store.update({'toxicity_threshold': 0.9})

    assert settings.auto_remove_high_risk is True
    assert settings.toxicity_threshold == 0.9
    assert ModerationSettings.query.count() == 1


@pytest.mark.parametrize('threshold', [-0.1, 1.01, 'high', True])
def test_threshold_must_be_between_zero_and_one(store, threshold):
    store.update({'toxicity_threshold': 0.4})

    with pytest.raises(ValidationError):
        store.update({'toxicity_threshold': threshold})

    assert store.get().toxicity_threshold == 0.4


@pytest.mark.parametrize('threshold', [0, 1])
def test_threshold_bounds_are_inclusive(store, threshold):
    assert store.update({'toxicity_threshold': threshold}).toxicity_threshold == threshold


def test_unknown_settings_are_rejected(store):
    with pytest.raises(ValidationError) as excinfo:
        store.update({'auto_ban': True})

    assert 'auto_ban' in excinfo.value.message


def test_switches_must_be_booleans(store):
    with pytest.raises(ValidationError):
        store.update({'enabled': 'yes'})
