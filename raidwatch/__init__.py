"""raidwatch - air-raid alert watcher with call escalation."""

__version__ = "0.1.0"
__logo__ = "🚨"
