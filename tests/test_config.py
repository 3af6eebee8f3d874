"""Tests for phpmd_ide.config — settings loading and ruleset selection."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from phpmd_ide.config import PHPMDSettings, load_settings, parse_rulesets
from phpmd_ide.contracts import CANONICAL_RULESETS, RULESETS, ReportFormat, RunMode


# ---------------------------------------------------------------------------
# parse_rulesets
# ---------------------------------------------------------------------------


class TestParseRulesets:
    """Comma-separated selection → ordered ruleset list."""

    def test_drops_unknown_tokens(self):
        assert parse_rulesets("cleancode,bogus,design") == ["cleancode", "design"]

    def test_trims_whitespace(self):
        assert parse_rulesets(" naming ,  unusedcode") == ["naming", "unusedcode"]

    def test_preserves_order(self):
        assert parse_rulesets("naming,cleancode") == ["naming", "cleancode"]

    def test_keeps_duplicates(self):
        assert parse_rulesets("design,design") == ["design", "design"]

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_selection_means_all(self, raw):
        assert parse_rulesets(raw) == list(RULESETS)

    def test_all_invalid_gives_empty_list(self):
        assert parse_rulesets("bogus,nothing") == []

    def test_substring_filter_differs_from_membership(self):
        # The filter tests inclusion in the canonical string, not in the
        # set of names, so fragments of valid names are accepted.
        selected = parse_rulesets("code,design,size")
        assert selected == ["code", "design", "size"]

        by_membership = [name for name in selected if name in RULESETS]
        assert by_membership == ["design"]

    def test_blank_token_kept(self):
        assert parse_rulesets("naming,,design") == ["naming", "", "design"]


# ---------------------------------------------------------------------------
# PHPMDSettings
# ---------------------------------------------------------------------------


class TestSettings:
    """Defaults, environment and validation."""

    def test_defaults(self):
        s = PHPMDSettings()
        assert s.enabled is True
        assert s.executable_path is None
        assert s.executable == "phpmd"
        assert s.rulesets == CANONICAL_RULESETS
        assert s.selected_rulesets == list(RULESETS)
        assert s.report_format is ReportFormat.TEXT
        assert s.run_mode is RunMode.ON_SAVE
        assert s.debounce_ms == 1000

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("PHPMD_ENABLED", "false")
        monkeypatch.setenv("PHPMD_EXECUTABLE_PATH", "/opt/phpmd/bin/phpmd")
        monkeypatch.setenv("PHPMD_RULESETS", "naming")
        monkeypatch.setenv("PHPMD_DEBOUNCE_MS", "250")
        s = PHPMDSettings()
        assert s.enabled is False
        assert s.executable == "/opt/phpmd/bin/phpmd"
        assert s.selected_rulesets == ["naming"]
        assert s.debounce_ms == 250

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("PHPMD_RULESETS=design\n", encoding="utf-8")
        assert PHPMDSettings().selected_rulesets == ["design"]

    def test_blank_executable_falls_back(self):
        assert PHPMDSettings(executable_path="  ").executable == "phpmd"

    def test_negative_debounce_rejected(self):
        with pytest.raises(ValidationError):
            PHPMDSettings(debounce_ms=-1)


# ---------------------------------------------------------------------------
# load_settings
# ---------------------------------------------------------------------------


class TestLoadSettings:
    """Host configuration section → settings."""

    def test_host_keys(self):
        s = load_settings({
            "enabled": True,
            "validate.executablePath": "vendor/bin/phpmd",
            "validate.rulesets": "cleancode,bogus,design",
        })
        assert s.executable == "vendor/bin/phpmd"
        assert s.selected_rulesets == ["cleancode", "design"]

    def test_missing_section_uses_defaults(self):
        s = load_settings(None)
        assert s.enabled is True
        assert s.selected_rulesets == list(RULESETS)

    def test_null_values_use_defaults(self):
        s = load_settings({"validate.executablePath": None, "validate.rulesets": None})
        assert s.executable == "phpmd"
        assert s.selected_rulesets == list(RULESETS)

    def test_unknown_keys_ignored(self):
        s = load_settings({"validate.somethingElse": 1})
        assert s.enabled is True

    def test_run_mode_key(self):
        assert load_settings({"validate.runMode": "onType"}).run_mode is RunMode.ON_TYPE

    def test_host_section_beats_environment(self, monkeypatch):
        monkeypatch.setenv("PHPMD_RULESETS", "naming")
        s = load_settings({"validate.rulesets": "design"})
        assert s.selected_rulesets == ["design"]

    def test_overrides_beat_host_section(self):
        s = load_settings({"enabled": False}, enabled=True, debounce_ms=10)
        assert s.enabled is True
        assert s.debounce_ms == 10
