"""
EmberGuard - Auto-Delete Tests
==============================

Tests for delayed message removal rules and their follow-up actions.
"""

import pytest

from emberguard.models.community import AutoDeleteSettings, CommunityConfig
from emberguard.models.events import AttachmentInfo
from emberguard.models.verdicts import ActionKind, SpamVerdict
from emberguard.services.auto_delete import auto_delete_action, auto_delete_reason
from emberguard.services.moderation import coordinator

BASE_TIME = 1_700_000_000.0
SIX_MENTIONS = "<@1> <@2> <@3> <@4> <@5> <@6>"

IMAGE = AttachmentInfo(filename="cat.png", content_type="image/png")
VIDEO = AttachmentInfo(filename="clip.mp4", content_type="video/mp4")
ARCHIVE = AttachmentInfo(filename="Tools.ZIP", content_type="application/zip")


def _settings(**kwargs) -> AutoDeleteSettings:
    return AutoDeleteSettings(enabled=True, **kwargs)


async def configure(engine, community_id="guild-1", **patch):
    result = await engine.update_config(community_id, patch)
    assert result
    return result.value


# =============================================================================
# Settings
# =============================================================================

class TestAutoDeleteSettings:
    """Tests for the auto_delete config section."""

    def test_defaults(self):
        """Test the section is off with a five minute timer."""
        settings = CommunityConfig().auto_delete

        assert settings.enabled is False
        assert settings.timer_minutes == 5
        assert settings.channels == set()
        assert settings.file_types == set()

    @pytest.mark.parametrize("raw, expected", [(-3, 0), (0, 0), (90, 90), (10_000, 1440), ("junk", 5)])
    def test_timer_is_clamped(self, raw, expected):
        """Test timer_minutes stays within 0..1440."""
        assert AutoDeleteSettings(timer_minutes=raw).timer_minutes == expected

    def test_extensions_are_normalized(self):
        """Test extensions lose the dot and case, and blanks are dropped."""
        settings = AutoDeleteSettings(file_types=[".PDF", " exe ", ".", ""])

        assert settings.file_types == {"pdf", "exe"}

    def test_keywords_are_lower_cased(self):
        settings = AutoDeleteSettings(keyword_triggers=["Sell", "  "])

        assert settings.keyword_triggers == {"sell"}

    def test_record_is_sorted(self, make_config):
        """Test sets serialize as sorted lists."""
        config = make_config(auto_delete={"channels": ["9", "1"], "file_types": ["zip", "exe"]})

        record = config.to_record()["auto_delete"]
        assert record["channels"] == ["1", "9"]
        assert record["file_types"] == ["exe", "zip"]


# =============================================================================
# Rules
# =============================================================================

class TestAutoDeleteReason:
    """Tests for auto_delete_reason()."""

    def test_disabled_never_matches(self, message):
        settings = AutoDeleteSettings(enabled=False, channels=["channel-1"])

        assert auto_delete_reason(message("hi"), settings) is None

    def test_no_rule_matches(self, message):
        assert auto_delete_reason(message("hi"), _settings(channels=["other"])) is None

    def test_channel(self, message):
        assert auto_delete_reason(message("hi"), _settings(channels=["channel-1"])) == "channel auto-delete"

    def test_keyword_is_case_insensitive(self, message):
        """Test keywords match as substrings regardless of case."""
        settings = _settings(keyword_triggers=["trade"])

        assert auto_delete_reason(message("Anyone TRADING?"), settings) == "keyword trigger"

    def test_images_and_videos(self, message):
        """Test media type rules look at the attachment MIME type."""
        settings = _settings(message_types={"images": True, "videos": True})

        assert auto_delete_reason(message("x", attachments=(IMAGE,)), settings) == "image auto-delete"
        assert auto_delete_reason(message("x", attachments=(VIDEO,)), settings) == "video auto-delete"
        assert auto_delete_reason(message("x", attachments=(ARCHIVE,)), settings) is None

    def test_unknown_content_type_is_not_media(self, message):
        settings = _settings(message_types={"images": True})
        attachment = AttachmentInfo(filename="cat.png")

        assert auto_delete_reason(message("x", attachments=(attachment,)), settings) is None

    def test_links_and_embeds(self, message):
        settings = _settings(message_types={"links": True, "embeds": True})

        assert auto_delete_reason(message("see http://a.example/x"), settings) == "link auto-delete"
        assert auto_delete_reason(message("plain", has_embeds=True), settings) == "embed auto-delete"
        assert auto_delete_reason(message("plain"), settings) is None

    def test_type_rules_off_by_default(self, message):
        settings = _settings()

        assert auto_delete_reason(message("https://a.example", attachments=(IMAGE,), has_embeds=True), settings) is None

    def test_file_extension(self, message):
        """Test extensions match the filename suffix case-insensitively."""
        settings = _settings(file_types=[".zip"])

        assert auto_delete_reason(message("x", attachments=(ARCHIVE,)), settings) == "zip file auto-delete"

    def test_extension_must_be_a_suffix(self, message):
        settings = _settings(file_types=["zip"])
        attachment = AttachmentInfo(filename="zip-notes.txt", content_type="text/plain")

        assert auto_delete_reason(message("x", attachments=(attachment,)), settings) is None

    def test_last_matching_rule_names_the_reason(self, message):
        """Test later rules override earlier ones."""
        settings = _settings(
            channels=["channel-1"],
            keyword_triggers=["free"],
            message_types={"images": True, "links": True, "embeds": True},
            file_types=["png"],
        )

        assert auto_delete_reason(message("hello"), settings) == "channel auto-delete"
        assert auto_delete_reason(message("free stuff"), settings) == "keyword trigger"
        assert auto_delete_reason(message("free https://x.example"), settings) == "link auto-delete"
        assert auto_delete_reason(
            message("free https://x.example", has_embeds=True), settings
        ) == "embed auto-delete"
        assert auto_delete_reason(message("free", attachments=(IMAGE,)), settings) == "png file auto-delete"


class TestAutoDeleteAction:
    """Tests for auto_delete_action()."""

    def test_action_carries_delay_and_channel(self, message):
        settings = _settings(channels=["channel-1"], timer_minutes=3)

        action = auto_delete_action(message("hi"), settings)

        assert action.kind is ActionKind.SCHEDULE_DELETE
        assert action.delete_message is True
        assert action.delay_seconds == 180
        assert action.channel_id == "channel-1"
        assert action.reason == "channel auto-delete"
        assert action.to_dict()["kind"] == "schedule_delete"

    def test_zero_timer_deletes_immediately(self, message):
        action = auto_delete_action(message("hi"), _settings(channels=["channel-1"], timer_minutes=0))

        assert action.delay_seconds == 0

    def test_no_match_gives_none(self, message):
        assert auto_delete_action(message("hi"), _settings()) is None


# =============================================================================
# Coordinator
# =============================================================================

class TestAutoDeleteFollowups:
    """Tests for auto-delete follow-ups produced by evaluate_message()."""

    @pytest.mark.asyncio
    async def test_unactioned_message_gets_followup(self, engine, message):
        """Test a clean message in an auto-delete channel is scheduled."""
        await configure(engine, auto_delete={"enabled": True, "channels": ["channel-1"], "timer_minutes": 1})

        result = await engine.evaluate_message(message("hello", timestamp=BASE_TIME))

        assert result.action.kind is ActionKind.NONE
        assert [f.kind for f in result.followups] == [ActionKind.SCHEDULE_DELETE]
        assert result.followups[0].delay_seconds == 60
        assert result.updated_stats is None

    @pytest.mark.asyncio
    async def test_exempt_actor_is_still_scheduled(self, engine, message):
        """Test auto-delete applies to administrators too."""
        await configure(engine, auto_delete={"enabled": True, "keyword_triggers": ["lfg"]})

        result = await engine.evaluate_message(message("LFG now", is_administrator=True, timestamp=BASE_TIME))

        assert result.followups[0].reason == "keyword trigger"

    @pytest.mark.asyncio
    async def test_spam_action_skips_auto_delete(self, engine, message):
        """Test a message already actioned for spam gets no scheduled delete."""
        await configure(
            engine,
            anti_spam={"enabled": True},
            auto_delete={"enabled": True, "channels": ["channel-1"]},
        )

        result = await engine.evaluate_message(message(SIX_MENTIONS, timestamp=BASE_TIME))

        assert isinstance(result.verdict, SpamVerdict)
        assert all(f.kind is not ActionKind.SCHEDULE_DELETE for f in result.followups)

    @pytest.mark.asyncio
    async def test_content_action_skips_auto_delete(self, engine, message):
        await configure(
            engine,
            content_filter={"enabled": True, "links": {"enabled": True, "denylist": ["evil.com"]}},
            auto_delete={"enabled": True, "message_types": {"links": True}},
        )

        result = await engine.evaluate_message(message("https://evil.com", timestamp=BASE_TIME))

        assert result.action.kind is ActionKind.DELETE_AND_NOTIFY
        assert result.followups == []

    @pytest.mark.asyncio
    async def test_rule_error_is_contained(self, engine, message, monkeypatch):
        """Test a raising rule gives no follow-up instead of an exception."""
        await configure(engine, auto_delete={"enabled": True, "channels": ["channel-1"]})

        def boom(*args, **kwargs):
            raise RuntimeError("rule bug")

        monkeypatch.setattr(coordinator, "auto_delete_action", boom)
        result = await engine.evaluate_message(message("hello", timestamp=BASE_TIME))

        assert result.followups == []
