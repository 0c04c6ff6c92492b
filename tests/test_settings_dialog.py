"""Tests for the settings window form."""

from studio_core.settings import StudioSettings
from studio_core.settings_dialog import SettingsDialog
from studio_shared.studio_status import Target


def make_dialog(**overrides):
    values = dict(user_id="user", api_key="secret", teamspace_id="team", studio_name="")
    values.update(overrides)
    return SettingsDialog(StudioSettings(**values))


def test_listed_studios_are_offered_by_lookup_name():
    dialog = make_dialog()

    dialog.set_targets([Target(id="cs-1", name="my-studio", display_name="My Studio")])
    dialog._studio_combo.setCurrentIndex(0)

    assert dialog._studio_combo.itemText(0) == "my-studio"
    assert dialog.collect().studio_name == "my-studio"


def test_set_targets_keeps_typed_name():
    dialog = make_dialog(studio_name="typed")

    dialog.set_targets([Target(id="cs-1", name="other")])

    assert dialog.collect().studio_name == "typed"


def test_collect_round_trips_loaded_settings():
    settings = StudioSettings(
        user_id="user",
        api_key="secret",
        teamspace_id="team",
        studio_name="my-studio",
        refresh_period_seconds=60,
        fast_refresh_period_seconds=3,
    )

    assert SettingsDialog(settings).collect() == settings
