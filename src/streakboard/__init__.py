"""Streakboard: daily habit challenge scoring engine."""
