"""
EmberGuard - Heat Tracker Tests
===============================

Tests for heat scoring, decay, capping and snapshot/restore.
"""

from emberguard.services.antispam import HeatTracker
from emberguard.services.antispam.detectors import count_emojis, count_mentions, normalize_content

T0 = 1_000_000.0


def six_mentions() -> str:
    return " ".join(f"<@{i}>" for i in range(1, 7))


# =============================================================================
# Detectors
# =============================================================================

class TestDetectors:
    """Tests for the raw content counters."""

    def test_mentions_cover_users_and_roles(self):
        """Test user, nickname and role mentions all count."""
        assert count_mentions("<@1> <@!2> <@&3> @everyone") == 3

    def test_custom_and_unicode_emojis(self):
        """Test custom and unicode emojis both count."""
        assert count_emojis("<:wave:123> <a:spin:456> 🔥🎉") == 4

    def test_normalize_collapses_case_and_whitespace(self):
        """Test normalization used for duplicate matching."""
        assert normalize_content("  Buy   NOW\n buy now ") == "buy now buy now"


# =============================================================================
# Scoring
# =============================================================================

class TestScoring:
    """Tests for per-message rule scoring."""

    def test_first_message_is_free(self, spam_config):
        """Test an actor's first plain message adds no heat."""
        tracker = HeatTracker()
        obs = tracker.observe("a", "g", "hello there", spam_config, now=T0)

        assert obs.heat == 0
        assert obs.rules == ()
        assert obs.triggered is False

    def test_duplicate_fires_on_second_occurrence_only(self, spam_config):
        """Test the first copy is clean and the second one scores."""
        tracker = HeatTracker()
        first = tracker.observe("a", "g", "same text", spam_config, now=T0)
        second = tracker.observe("a", "g", "Same   TEXT", spam_config, now=T0 + 5)

        assert "duplicate" not in first.rules
        assert second.rules == ("duplicate",)
        assert second.heat == 3

    def test_duplicate_matches_anywhere_in_history(self, spam_config):
        """Test a repeat of an older message still counts."""
        tracker = HeatTracker()
        for i, text in enumerate(["one", "two", "three", "one"]):
            obs = tracker.observe("a", "g", text, spam_config, now=T0 + i * 5)

        assert obs.rules == ("duplicate",)

    def test_empty_content_is_never_duplicate(self, spam_config):
        """Test attachment-only messages do not match each other."""
        tracker = HeatTracker()
        tracker.observe("a", "g", "", spam_config, now=T0)
        obs = tracker.observe("a", "g", "   ", spam_config, now=T0 + 5)

        assert "duplicate" not in obs.rules

    def test_rapid_repost(self, spam_config):
        """Test messages under two seconds apart add rapid heat."""
        tracker = HeatTracker()
        tracker.observe("a", "g", "first", spam_config, now=T0)
        obs = tracker.observe("a", "g", "second", spam_config, now=T0 + 1)

        assert obs.rules == ("rapid",)
        assert obs.heat == 2

    def test_limits_are_strictly_greater(self, make_config):
        """Test exactly-at-limit content does not score."""
        config = make_config(anti_spam={"enabled": True, "mention_limit": 6})
        tracker = HeatTracker()

        at_limit = tracker.observe("a", "g", six_mentions(), config, now=T0)
        over_limit = tracker.observe("b", "g", six_mentions() + " <@7>", config, now=T0)

        assert at_limit.score == 0
        assert over_limit.rules == ("mentions",)

    def test_threshold_triggers(self, spam_config):
        """Test heat at the threshold reports triggered."""
        tracker = HeatTracker()
        obs = tracker.observe("a", "g", six_mentions(), spam_config, now=T0)

        assert obs.heat == 3
        assert obs.triggered is True

    def test_actors_and_communities_are_isolated(self, spam_config):
        """Test heat is tracked per (actor, community)."""
        tracker = HeatTracker()
        tracker.observe("a", "g1", six_mentions(), spam_config, now=T0)

        assert tracker.heat_of("a", "g1", now=T0) == 3
        assert tracker.heat_of("a", "g2", now=T0) == 0
        assert tracker.heat_of("b", "g1", now=T0) == 0


# =============================================================================
# Decay & Cap
# =============================================================================

class TestDecayAndCap:
    """Tests for heat decay and the upper bound."""

    def test_decay_is_monotonic(self, spam_config):
        """Test heat never rises with idle time."""
        tracker = HeatTracker(decay_period=10)
        tracker.observe("a", "g", six_mentions(), spam_config, now=T0)

        readings = [tracker.heat_of("a", "g", now=T0 + s) for s in range(0, 60, 3)]

        assert readings == sorted(readings, reverse=True)
        assert readings[0] == 3
        assert readings[-1] == 0

    def test_decay_applies_before_scoring(self, spam_config):
        """Test one point drains per decay period before the new score."""
        tracker = HeatTracker(decay_period=10)
        tracker.observe("a", "g", six_mentions(), spam_config, now=T0)
        obs = tracker.observe("a", "g", "calm message", spam_config, now=T0 + 25)

        assert obs.heat == 1

    def test_heat_is_capped(self, spam_config):
        """Test a long burst never exceeds heat_cap."""
        tracker = HeatTracker(heat_cap=12)
        for i in range(30):
            obs = tracker.observe("a", "g", "spam spam", spam_config, now=T0 + i * 0.1)

        assert obs.heat == 12


# =============================================================================
# Eviction
# =============================================================================

class TestEviction:
    """Tests for sweep, clear and the capacity bound."""

    def test_sweep_drops_idle_actors(self, spam_config):
        """Test actors idle past idle_eviction are removed."""
        tracker = HeatTracker(idle_eviction=300)
        tracker.observe("old", "g", "hi", spam_config, now=T0)
        tracker.observe("new", "g", "hi", spam_config, now=T0 + 250)

        assert tracker.sweep(now=T0 + 301) == 1
        assert len(tracker) == 1

    def test_capacity_evicts_least_recent(self, spam_config):
        """Test the oldest actor is dropped at capacity."""
        tracker = HeatTracker(max_tracked=2)
        tracker.observe("a", "g", six_mentions(), spam_config, now=T0)
        tracker.observe("b", "g", "hi", spam_config, now=T0 + 1)
        tracker.observe("c", "g", "hi", spam_config, now=T0 + 2)

        assert len(tracker) == 2
        assert tracker.heat_of("a", "g", now=T0 + 2) == 0

    def test_clear_single_or_all_communities(self, spam_config):
        """Test clear() scopes to one community or all."""
        tracker = HeatTracker()
        for community in ("g1", "g2", "g3"):
            tracker.observe("a", community, "hi", spam_config, now=T0)

        assert tracker.clear("a", "g1") == 1
        assert tracker.clear("a") == 2
        assert len(tracker) == 0


# =============================================================================
# Snapshot / Restore
# =============================================================================

class TestSnapshot:
    """Tests for carrying heat across restarts."""

    def test_restore_reproduces_state(self, spam_config):
        """Test a restored tracker continues where the old one stopped."""
        tracker = HeatTracker()
        tracker.observe("a", "g", "repeat me", spam_config, now=T0)
        tracker.observe("a", "g", "repeat me", spam_config, now=T0 + 1)

        restored = HeatTracker()
        assert restored.restore(tracker.snapshot(now=T0 + 1), now=T0 + 2) == 1
        assert restored.heat_of("a", "g", now=T0 + 2) == tracker.heat_of("a", "g", now=T0 + 2)

        obs = restored.observe("a", "g", "repeat me", spam_config, now=T0 + 3)
        assert "duplicate" in obs.rules

    def test_stale_and_malformed_entries_are_skipped(self, spam_config):
        """Test restore ignores old, future and broken entries."""
        tracker = HeatTracker(snapshot_max_age=3600)
        snapshot = {
            "version": 1,
            "taken_at": T0,
            "actors": [
                {"actor_id": "fresh", "community_id": "g", "heat": 4, "last_message_at": T0 - 10},
                {"actor_id": "stale", "community_id": "g", "heat": 4, "last_message_at": T0 - 7200},
                {"actor_id": "future", "community_id": "g", "heat": 4, "last_message_at": T0 + 60},
                {"actor_id": "broken", "community_id": "g", "heat": "hot"},
                "not a dict",
            ],
        }

        assert tracker.restore(snapshot, now=T0) == 1
        assert tracker.heat_of("fresh", "g", now=T0 - 10) == 4

    def test_unknown_version_is_ignored(self):
        """Test snapshots from another format restore nothing."""
        tracker = HeatTracker()
        assert tracker.restore({"version": 99, "actors": []}) == 0
        assert tracker.restore(None) == 0
