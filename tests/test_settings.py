"""Unit tests for persisted settings."""

from conftest import MemoryStore
from studio_core.control_client import Credentials
from studio_core.settings import (
    KEY_API_KEY,
    KEY_FAST_REFRESH_PERIOD,
    KEY_REFRESH_PERIOD,
    KEY_STUDIO_NAME,
    KEY_TEAMSPACE_ID,
    KEY_USER_ID,
    StudioSettings,
    StudioSettingsManager,
)


class TestReadSettings:
    def test_defaults_when_store_is_empty(self, memory_store):
        settings = StudioSettingsManager(store=memory_store).read_settings()

        assert settings == StudioSettings()
        assert settings.refresh_period_seconds == 30
        assert settings.fast_refresh_period_seconds == 5
        assert settings.is_complete() is False

    def test_reads_all_fields(self):
        store = MemoryStore(
            {
                KEY_USER_ID: "user",
                KEY_API_KEY: "secret",
                KEY_TEAMSPACE_ID: "team",
                KEY_STUDIO_NAME: " my-studio ",
                KEY_REFRESH_PERIOD: "60",
                KEY_FAST_REFRESH_PERIOD: 10,
            }
        )

        settings = StudioSettingsManager(store=store).read_settings()

        assert settings.studio_name == "my-studio"
        assert settings.refresh_period_seconds == 60
        assert settings.fast_refresh_period_seconds == 10
        assert settings.credentials == Credentials(user_id="user", api_key="secret", teamspace_id="team")
        assert settings.is_complete() is True

    def test_out_of_range_periods_are_clamped(self):
        store = MemoryStore({KEY_REFRESH_PERIOD: 2, KEY_FAST_REFRESH_PERIOD: 600})

        settings = StudioSettingsManager(store=store).read_settings()

        assert settings.refresh_period_seconds == 5
        assert settings.fast_refresh_period_seconds == 60

    def test_garbage_periods_fall_back_to_defaults(self):
        store = MemoryStore({KEY_REFRESH_PERIOD: "often", KEY_FAST_REFRESH_PERIOD: None})

        settings = StudioSettingsManager(store=store).read_settings()

        assert settings.refresh_period_seconds == 30
        assert settings.fast_refresh_period_seconds == 5


class TestSaveSettings:
    def test_round_trips_through_store(self, memory_store):
        manager = StudioSettingsManager(store=memory_store)

        saved = manager.save_settings(
            StudioSettings(
                user_id=" user ",
                api_key="secret",
                teamspace_id="team",
                studio_name="my-studio",
                refresh_period_seconds=1000,
                fast_refresh_period_seconds=3,
            )
        )

        assert saved.user_id == "user"
        assert saved.refresh_period_seconds == 300
        assert memory_store.values[KEY_USER_ID] == "user"
        assert memory_store.values[KEY_REFRESH_PERIOD] == 300
        assert memory_store.sync_count == 1
        assert manager.read_settings() == saved

    def test_incomplete_when_studio_name_missing(self):
        settings = StudioSettings(user_id="u", api_key="k", teamspace_id="t")
        assert settings.credentials.is_complete is True
        assert settings.is_complete() is False
