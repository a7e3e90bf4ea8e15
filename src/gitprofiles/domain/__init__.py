"""Domain layer for gitprofiles."""
