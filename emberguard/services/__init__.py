"""
EmberGuard - Services Package
=============================

Detectors, the moderation coordinator, and background maintenance.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""
