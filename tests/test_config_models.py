"""
EmberGuard - Community Config Model Tests
=========================================

Tests for defaults, clamping, per-field fallback and serialization.
"""

import json

import pytest

from emberguard.core.config import ConfigValidationError, EngineConfig, load_config, reset_config
from emberguard.models.community import (
    COMMANDS_ONLY,
    CommunityConfig,
    CommunityStats,
)


# =============================================================================
# Defaults
# =============================================================================

class TestDefaults:
    """Tests for a freshly created config."""

    def test_everything_disabled_by_default(self):
        """Test every protection starts switched off."""
        config = CommunityConfig()

        assert config.anti_spam.enabled is False
        assert config.content_filter.enabled is False
        assert config.raid_control.enabled is False
        assert config.raid_control.panic_mode is False
        assert config.tickets.enabled is False
        assert config.slow_mode.auto_enable is False

    def test_default_thresholds(self):
        """Test documented default thresholds."""
        config = CommunityConfig()

        assert config.anti_spam.heat_threshold == 3
        assert config.anti_spam.mention_limit == 5
        assert config.raid_control.join_limit == 5
        assert config.raid_control.window_seconds == 30
        assert config.raid_control.join_gate.min_account_age_days == 7
        assert config.tickets.auto_close_hours == 24

    def test_non_dict_record_gives_defaults(self):
        """Test from_stored() accepts anything."""
        assert CommunityConfig.from_stored(None) == CommunityConfig()
        assert CommunityConfig.from_stored([1, 2, 3]) == CommunityConfig()
        assert CommunityConfig.from_stored("config") == CommunityConfig()


# =============================================================================
# Clamping & Fallback
# =============================================================================

class TestClamping:
    """Tests for range clamping of numeric settings."""

    def test_out_of_range_values_are_clamped(self):
        """Test values outside their bounds snap to the nearest bound."""
        config = CommunityConfig.from_stored({
            "anti_spam": {"heat_threshold": 50, "mention_limit": 0},
            "raid_control": {"join_limit": 500, "window_seconds": 1},
        })

        assert config.anti_spam.heat_threshold == 10
        assert config.anti_spam.mention_limit == 1
        assert config.raid_control.join_limit == 50
        assert config.raid_control.window_seconds == 5

    def test_numeric_strings_are_parsed(self):
        """Test numeric strings are coerced."""
        config = CommunityConfig.from_stored({"anti_spam": {"heat_threshold": "7"}})
        assert config.anti_spam.heat_threshold == 7

    def test_garbage_falls_back_to_default(self):
        """Test unparseable numbers use the field default."""
        config = CommunityConfig.from_stored({"anti_spam": {"heat_threshold": "lots", "emoji_limit": True}})

        assert config.anti_spam.heat_threshold == 3
        assert config.anti_spam.emoji_limit == 10

    def test_assignment_is_clamped(self):
        """Test clamping also applies when a value is assigned."""
        config = CommunityConfig()
        config.anti_spam.heat_threshold = 99
        config.raid_control.join_limit = -4

        assert config.anti_spam.heat_threshold == 10
        assert config.raid_control.join_limit == 1


class TestFieldFallback:
    """Tests that one bad value never resets its neighbours."""

    def test_bad_field_keeps_siblings(self):
        """Test an invalid bool resets only that field."""
        config = CommunityConfig.from_stored({
            "anti_spam": {"enabled": {"nested": True}, "heat_threshold": 6},
        })

        assert config.anti_spam.enabled is False
        assert config.anti_spam.heat_threshold == 6

    def test_bad_section_resets_only_that_section(self):
        """Test a non-object section falls back while others survive."""
        config = CommunityConfig.from_stored({
            "anti_spam": "not a section",
            "raid_control": {"enabled": True},
        })

        assert config.anti_spam == CommunityConfig().anti_spam
        assert config.raid_control.enabled is True

    def test_unknown_keys_are_ignored(self):
        """Test extra keys from older versions are dropped."""
        config = CommunityConfig.from_stored({"legacy_flag": 1, "anti_spam": {"old": "x"}})
        assert "legacy_flag" not in config.to_record()

    def test_unknown_restriction_kinds_are_dropped(self):
        """Test channel restrictions keep only known kinds."""
        config = CommunityConfig.from_stored({
            "channel_restrictions": {"1": COMMANDS_ONLY, "2": "memes_only"},
        })

        assert config.channel_restrictions == {"1": COMMANDS_ONLY}
        assert config.restriction_for("1") == COMMANDS_ONLY
        assert config.restriction_for("2") is None


# =============================================================================
# Sets & Serialization
# =============================================================================

class TestSerialization:
    """Tests for set normalization and stable output."""

    def test_domains_are_normalized(self):
        """Test domains are lower-cased with www. removed."""
        config = CommunityConfig.from_stored({
            "content_filter": {"links": {"denylist": ["WWW.Evil.COM", "spam.net ", ""]}},
        })
        assert config.content_filter.links.denylist == {"evil.com", "spam.net"}

    def test_phrases_are_lower_cased(self):
        """Test banned phrases match case-insensitively."""
        config = CommunityConfig.from_stored({"content_filter": {"banned_phrases": ["Buy NOW"]}})
        assert config.content_filter.banned_phrases == {"buy now"}

    def test_sets_serialize_as_sorted_lists(self):
        """Test sets dump as sorted lists."""
        config = CommunityConfig.from_stored({"exempt_roles": ["30", "10", "20"]})
        assert config.to_record()["exempt_roles"] == ["10", "20", "30"]

    def test_record_round_trip_is_stable(self):
        """Test reading a record and dumping it again gives the same JSON."""
        config = CommunityConfig.from_stored({
            "anti_spam": {"enabled": True, "heat_threshold": 4},
            "content_filter": {"banned_phrases": ["b", "a"], "links": {"allowlist": ["z.com", "a.com"]}},
            "channel_restrictions": {"5": "media_only"},
        })
        first = json.dumps(config.to_record(), sort_keys=True)
        second = json.dumps(CommunityConfig.from_stored(json.loads(first)).to_record(), sort_keys=True)

        assert first == second


# =============================================================================
# Statistics
# =============================================================================

class TestCommunityStats:
    """Tests for the stats block."""

    def test_record_increments_all_counters(self):
        """Test record() bumps day, week, total and the kind count."""
        stats = CommunityStats()
        stats.record("spam")
        stats.record("spam")
        stats.record("content")

        assert stats.actions_today == 3
        assert stats.actions_week == 3
        assert stats.actions_total == 3
        assert stats.violation_counts == {"spam": 2, "content": 1}

    def test_negative_counts_are_clamped(self):
        """Test corrupted negative counters load as zero."""
        stats = CommunityStats.model_validate({"actions_total": -5, "violation_counts": {"spam": -1}})

        assert stats.actions_total == 0
        assert stats.violation_counts == {"spam": 0}


# =============================================================================
# Engine Settings
# =============================================================================

class TestEngineConfig:
    """Tests for environment-driven engine settings."""

    def test_env_values_are_parsed_and_clamped(self, monkeypatch, tmp_path):
        """Test env parsing, clamping and invalid fallbacks."""
        monkeypatch.setenv("EMBERGUARD_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("HEAT_CAP", "5")
        monkeypatch.setenv("LOCK_TIMEOUT", "2.5")
        monkeypatch.setenv("PANIC_DURATION", "not-a-number")
        monkeypatch.setenv("ERROR_WEBHOOK_URL", "ftp://nope")

        reset_config()
        config = load_config()

        assert config.data_dir == tmp_path
        assert config.heat_cap == 10
        assert config.lock_timeout == 2.5
        assert config.panic_duration == EngineConfig.panic_duration
        assert config.error_webhook_url is None

    def test_api_settings(self, monkeypatch, tmp_path):
        """Test the admin API port range and key."""
        monkeypatch.setenv("EMBERGUARD_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("EMBERGUARD_API_PORT", "99999")
        monkeypatch.setenv("EMBERGUARD_API_KEY", "secret")

        config = load_config()

        assert config.api_port == 65535
        assert config.api_key == "secret"

    def test_data_dir_must_be_a_directory(self, monkeypatch, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("x")
        monkeypatch.setenv("EMBERGUARD_DATA_DIR", str(target))

        with pytest.raises(ConfigValidationError):
            load_config()
