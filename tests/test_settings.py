import pytest

from screen_guardian.config import DEFAULT_SETTINGS
from screen_guardian.settings import InvalidSettingError, Settings
from screen_guardian.settings_store import SettingsStore
from screen_guardian.state import PauseLogEntry, WarningConfig

TODAY = "2026-03-02"


class TestDefaults:
    def test_written_on_first_run(self, settings, store):
        for key, value in DEFAULT_SETTINGS.items():
            assert store.get(key) == value

    def test_existing_values_kept(self, settings, store):
        store.set("limit_monday", "30")
        settings.initialize_defaults()
        assert store.get("limit_monday") == "30"

    def test_weekday_limits(self, settings):
        assert [settings.daily_limit_minutes(d) for d in range(7)] == [120, 120, 120, 120, 180, 240, 240]


class TestParsing:
    def test_malformed_int_falls_back(self, settings, store):
        store.set("pause_cooldown", "soon")
        assert settings.pause_config().cooldown_minutes == 15

    def test_missing_key_uses_default(self, tmp_path):
        bare = Settings(SettingsStore(str(tmp_path / "empty.json")))
        assert bare.pause_config().daily_budget_minutes == 45
        assert bare.passcode() == "0000"

    def test_flags(self, settings, store):
        assert settings.pause_config().enabled
        store.set("pause_enabled", "0")
        assert not settings.pause_config().enabled

    def test_warnings(self, settings):
        assert settings.warnings() == [
            WarningConfig(10, "10 minutes remaining!"),
            WarningConfig(5, "5 minutes remaining!"),
        ]

    def test_unreadable_remaining_time(self, settings, store):
        store.set(f"remaining_time_{TODAY}", "x")
        assert settings.load_remaining_time(TODAY) is None

    def test_remote_admin_id_blank_is_none(self, settings):
        assert settings.remote_admin_id() is None


class TestPauseLog:
    def test_append_format(self, settings, store):
        settings.append_pause_log(TODAY, PauseLogEntry("09:15:00", 300))
        settings.append_pause_log(TODAY, PauseLogEntry("10:00:30", 45))
        assert store.get(f"pause_log_{TODAY}") == "09:15:00:300s,10:00:30:45s"
        assert settings.pause_log(TODAY) == [PauseLogEntry("09:15:00", 300), PauseLogEntry("10:00:30", 45)]

    def test_skips_garbage_entries(self, settings, store):
        store.set(f"pause_log_{TODAY}", "09:15:00:300s,,junk,10:00:00:xs")
        assert settings.pause_log(TODAY) == [PauseLogEntry("09:15:00", 300)]

    def test_counters_are_date_scoped(self, settings):
        settings.save_pause_used(TODAY, 120)
        assert settings.pause_used("2026-03-03") == 0


class TestChangePasscode:
    def test_success(self, settings):
        settings.change_passcode("0000", "2468", "2468")
        assert settings.passcode() == "2468"

    @pytest.mark.parametrize(
        "current, new, confirm",
        [("1111", "2468", "2468"), ("0000", "246", "246"), ("0000", "24a8", "24a8"), ("0000", "2468", "2469")],
    )
    def test_rejected(self, settings, current, new, confirm):
        with pytest.raises(InvalidSettingError):
            settings.change_passcode(current, new, confirm)
        assert settings.passcode() == "0000"


class TestApplyEdits:
    def test_writes_all(self, settings, store):
        settings.apply_edits({"limit_friday": " 90 ", "blocking_message": "Bedtime", "remote_enabled": "1"})
        assert store.get("limit_friday") == "90"
        assert settings.blocking_message() == "Bedtime"
        assert settings.remote_enabled()

    def test_invalid_value_writes_nothing(self, settings, store):
        with pytest.raises(InvalidSettingError):
            settings.apply_edits({"limit_friday": "90", "pause_cooldown": "-1"})
        assert store.get("limit_friday") == "180"

    @pytest.mark.parametrize("values", [{"passcode": "1234"}, {"nonsense": "1"}, {"pause_enabled": "yes"}])
    def test_rejects(self, settings, values):
        with pytest.raises(InvalidSettingError):
            settings.apply_edits(values)


class TestFallbacks:
    def test_missing_limit_is_120_every_day(self, tmp_path):
        bare = Settings(SettingsStore(str(tmp_path / "empty.json")))
        assert [bare.daily_limit_minutes(d) for d in range(7)] == [120] * 7

    def test_missing_warning_minutes_is_5(self, tmp_path):
        bare = Settings(SettingsStore(str(tmp_path / "empty.json")))
        assert [w.minutes for w in bare.warnings()] == [5, 5]
        assert bare.warnings()[0].message == "5 minutes remaining!"


class TestSettingsForm:
    def test_editable_values_cover_form_keys(self, settings):
        values = settings.editable_values()
        assert values["limit_saturday"] == "240"
        assert values["remote_admin_id"] == ""
        assert "passcode" not in values

    def test_saves_edits_without_passcode_change(self, settings, store):
        assert not settings.submit_form({"limit_monday": "60", "pause_enabled": "0"})
        assert store.get("limit_monday") == "60"
        assert not settings.pause_config().enabled
        assert settings.passcode() == "0000"

    def test_saves_edits_and_passcode(self, settings, store):
        assert settings.submit_form({"limit_monday": "60"}, "0000", "1357", "1357")
        assert store.get("limit_monday") == "60"
        assert settings.passcode() == "1357"

    def test_bad_passcode_writes_no_edits(self, settings, store):
        with pytest.raises(InvalidSettingError, match="do not match"):
            settings.submit_form({"limit_monday": "60"}, "0000", "1357", "1358")
        assert store.get("limit_monday") == "120"
        assert settings.passcode() == "0000"

    def test_bad_field_keeps_passcode(self, settings):
        with pytest.raises(InvalidSettingError):
            settings.submit_form({"limit_monday": "sixty"}, "0000", "1357", "1357")
        assert settings.passcode() == "0000"

    def test_round_trips_its_own_values(self, settings, store):
        before = store.snapshot()
        settings.submit_form(settings.editable_values())
        assert store.snapshot() == before
