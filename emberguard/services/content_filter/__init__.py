"""
EmberGuard - Content Filter Package
===================================

Rule-based content classification.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .classifier import ContentClassifier, extract_hostname, domain_matches

__all__ = [
    "ContentClassifier",
    "extract_hostname",
    "domain_matches",
]
