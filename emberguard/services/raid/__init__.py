"""
EmberGuard - Raid Detection Package
===================================

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .detector import JoinPatternDetector, REASON_NEW_ACCOUNT, REASON_NO_AVATAR
from .models import JoinRecord, JoinWindow

__all__ = [
    "JoinPatternDetector",
    "JoinRecord",
    "JoinWindow",
    "REASON_NEW_ACCOUNT",
    "REASON_NO_AVATAR",
]
