"""
EmberGuard - Discord Adapter Tests
==================================

Tests for converting discord.py objects into engine events.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from emberguard.adapters import join_event_from_discord, message_event_from_discord
from emberguard.models.events import AttachmentInfo

CREATED = datetime(2023, 11, 14, 22, 0, tzinfo=timezone.utc)


def _role(role_id: int) -> MagicMock:
    role = MagicMock()
    role.id = role_id
    return role


def _message(content: str = "hi", bot: bool = False) -> MagicMock:
    message = MagicMock()
    message.content = content
    message.guild.id = 111
    message.channel.id = 222
    message.author.id = 333
    message.author.bot = bot
    message.author.roles = [_role(1), _role(2)]
    message.author.guild_permissions.administrator = False
    message.attachments = []
    message.embeds = []
    message.created_at = CREATED
    return message


class TestMessageAdapter:
    """Tests for message_event_from_discord()."""

    def test_guild_message(self):
        """Test ids become strings and the timestamp epoch seconds."""
        event = message_event_from_discord(_message("hello"))

        assert event.actor_id == "333"
        assert event.community_id == "111"
        assert event.channel_id == "222"
        assert event.content == "hello"
        assert event.actor_roles == frozenset({"1", "2"})
        assert event.is_administrator is False
        assert event.has_attachments is False
        assert event.attachments == ()
        assert event.has_embeds is False
        assert event.timestamp == CREATED.timestamp()

    def test_administrator_and_attachments(self):
        """Test admin permission and attachments are carried over."""
        message = _message()
        message.author.guild_permissions.administrator = True
        attachment = MagicMock()
        attachment.filename = "Photo.PNG"
        attachment.content_type = "image/png"
        message.attachments = [attachment]
        message.embeds = [MagicMock()]

        event = message_event_from_discord(message)

        assert event.is_administrator is True
        assert event.has_attachments is True
        assert event.attachments == (AttachmentInfo(filename="Photo.PNG", content_type="image/png"),)
        assert event.has_embeds is True

    def test_user_without_member_fields(self):
        """Test an author lacking roles and permissions maps to no roles."""
        message = _message()
        del message.author.roles
        del message.author.guild_permissions

        event = message_event_from_discord(message)

        assert event.actor_roles == frozenset()
        assert event.is_administrator is False

    def test_none_content(self):
        message = _message()
        message.content = None

        assert message_event_from_discord(message).content == ""

    def test_bot_message_is_skipped(self):
        assert message_event_from_discord(_message(bot=True)) is None

    def test_direct_message_is_skipped(self):
        message = _message()
        message.guild = None

        assert message_event_from_discord(message) is None


class TestJoinAdapter:
    """Tests for join_event_from_discord()."""

    def _member(self, bot: bool = False) -> MagicMock:
        member = MagicMock()
        member.id = 444
        member.bot = bot
        member.guild.id = 111
        member.created_at = datetime(2023, 11, 10, tzinfo=timezone.utc)
        member.joined_at = CREATED
        member.avatar = MagicMock()
        return member

    def test_member_join(self):
        event = join_event_from_discord(self._member())

        assert event.actor_id == "444"
        assert event.community_id == "111"
        assert event.account_created_at == datetime(2023, 11, 10, tzinfo=timezone.utc).timestamp()
        assert event.has_avatar is True
        assert event.timestamp == CREATED.timestamp()

    def test_default_avatar(self):
        """Test a member with no custom avatar."""
        member = self._member()
        member.avatar = None

        assert join_event_from_discord(member).has_avatar is False

    def test_missing_join_time(self):
        member = self._member()
        member.joined_at = None

        assert join_event_from_discord(member).timestamp is None

    def test_bot_join_is_skipped(self):
        assert join_event_from_discord(self._member(bot=True)) is None
