"""Utility helpers for gitprofiles."""
