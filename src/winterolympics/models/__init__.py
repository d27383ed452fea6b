"""Data models for the Winter Olympics Scoreboard."""
