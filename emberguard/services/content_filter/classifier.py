"""
EmberGuard - Content Classifier
===============================

Rule evaluator over message text and channel context.

DESIGN:
    classify() is a pure function of its arguments. Rules are evaluated
    in a fixed order and their results unioned:

    1. Links       denylist, allowlist, unparseable URLs
    2. Channel     commands-only / media-only / text-only
    3. Phrases     first banned phrase found (stops after one)
    4. NSFW        fixed heuristic pattern set
    5. Invites     Discord invite URLs

    Domain lists are hash sets. A listed domain also covers its
    subdomains, so a lookup walks the hostname's parent domains
    (a handful of set lookups per URL).

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import re
from typing import FrozenSet, Iterable, List, Optional, Pattern, Set
from urllib.parse import urlsplit

from emberguard.models.community import (
    COMMANDS_ONLY,
    MEDIA_ONLY,
    TEXT_ONLY,
    CommunityConfig,
    LinkRules,
)
from emberguard.models.verdicts import Violation, ViolationKind

from .constants import (
    COMMAND_PREFIXES,
    DISCORD_INVITE_PATTERN,
    LINK_PATTERN,
    MEDIA_MARKERS,
    NSFW_PATTERNS,
    VALID_HOSTNAME_PATTERN,
)


# =============================================================================
# Compiled Regex Patterns
# =============================================================================

LINK_REGEX: Pattern = re.compile(LINK_PATTERN, re.IGNORECASE)
INVITE_REGEX: Pattern = re.compile(DISCORD_INVITE_PATTERN, re.IGNORECASE)
HOSTNAME_REGEX: Pattern = re.compile(VALID_HOSTNAME_PATTERN)
NSFW_REGEXES = tuple(re.compile(p) for p in NSFW_PATTERNS)


# =============================================================================
# URL Helpers
# =============================================================================

def extract_hostname(url: str) -> Optional[str]:
    """
    Resolve the hostname of a URL.

    Returns:
        Lower-cased hostname without a leading "www.", or None when the
        URL cannot be parsed or has no usable host.
    """
    try:
        parts = urlsplit(url)
        parts.port  # Raises ValueError on a malformed port
    except ValueError:
        return None

    host = parts.hostname
    if not host:
        return None
    try:
        host = host.encode("idna").decode("ascii")
    except UnicodeError:
        return None
    if not HOSTNAME_REGEX.match(host):
        return None
    return host.removeprefix("www.")


def domain_matches(host: str, domains: Set[str]) -> bool:
    """True if host or any of its parent domains is in domains."""
    if not domains:
        return False
    labels = host.split(".")
    return any(".".join(labels[i:]) in domains for i in range(len(labels)))


def _has_role(actor_roles: Iterable[str], exempt: Set[str]) -> bool:
    return bool(exempt) and any(str(role) in exempt for role in actor_roles)


# =============================================================================
# Content Classifier
# =============================================================================

class ContentClassifier:
    """
    Stateless content rule evaluator.

    One instance can be shared across communities; all per-community
    settings arrive through the config argument.
    """

    def classify(
        self,
        content: str,
        config: CommunityConfig,
        channel_restriction: Optional[str] = None,
        actor_roles: Iterable[str] = frozenset(),
        has_attachments: bool = False,
    ) -> List[Violation]:
        """
        Evaluate every content rule against a message.

        Args:
            content: Raw message text.
            config: The community's config.
            channel_restriction: Restriction kind assigned to the channel.
            actor_roles: Role ids held by the author.
            has_attachments: Whether the message carries files or images.

        Returns:
            Violations found, in rule order. Empty means clean.
        """
        rules = config.content_filter
        if not rules.enabled:
            return []

        roles: FrozenSet[str] = frozenset(str(r) for r in actor_roles)
        violations: List[Violation] = []

        if rules.links.enabled and not _has_role(roles, rules.links.exempt_roles):
            violations.extend(self._check_links(content, rules.links))

        if channel_restriction:
            violation = self._check_restriction(content, channel_restriction, has_attachments)
            if violation:
                violations.append(violation)

        phrase = self._first_banned_phrase(content, rules.banned_phrases)
        if phrase:
            violations.append(Violation(ViolationKind.BANNED_PHRASE, phrase))

        if rules.nsfw_enabled:
            lowered = content.lower()
            for regex in NSFW_REGEXES:
                if regex.search(lowered):
                    violations.append(Violation(ViolationKind.NSFW, regex.pattern))

        if rules.invite_links.enabled and not _has_role(roles, rules.invite_links.exempt_roles):
            invite = INVITE_REGEX.search(content)
            if invite:
                violations.append(Violation(ViolationKind.DISCORD_INVITE, invite.group(0)))

        return violations

    # =========================================================================
    # Rules
    # =========================================================================

    def _check_links(self, content: str, links: LinkRules) -> List[Violation]:
        violations = []
        for url in LINK_REGEX.findall(content):
            host = extract_hostname(url)
            if host is None:
                violations.append(Violation(ViolationKind.INVALID_LINK, url))
            elif domain_matches(host, links.denylist):
                violations.append(Violation(ViolationKind.BLACKLISTED_LINK, host))
            elif links.allowlist and not domain_matches(host, links.allowlist):
                violations.append(Violation(ViolationKind.NON_WHITELISTED_LINK, host))
        return violations

    def _check_restriction(
        self,
        content: str,
        restriction: str,
        has_attachments: bool,
    ) -> Optional[Violation]:
        if restriction == COMMANDS_ONLY:
            if not content.lstrip().startswith(COMMAND_PREFIXES):
                return Violation(ViolationKind.NON_COMMAND_IN_COMMANDS_CHANNEL)
        elif restriction == MEDIA_ONLY:
            lowered = content.lower()
            if not has_attachments and not any(marker in lowered for marker in MEDIA_MARKERS):
                return Violation(ViolationKind.NON_MEDIA_IN_MEDIA_CHANNEL)
        elif restriction == TEXT_ONLY:
            if has_attachments or LINK_REGEX.search(content):
                return Violation(ViolationKind.MEDIA_IN_TEXT_ONLY_CHANNEL)
        return None

    @staticmethod
    def _first_banned_phrase(content: str, phrases: Set[str]) -> Optional[str]:
        if not phrases:
            return None
        lowered = content.lower()
        for phrase in sorted(phrases):
            if phrase in lowered:
                return phrase
        return None


__all__ = [
    "ContentClassifier",
    "extract_hostname",
    "domain_matches",
]
