"""Adapters implementing gitprofiles ports."""
