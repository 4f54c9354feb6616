"""Thrive learning platform backend: live session booking admission."""
