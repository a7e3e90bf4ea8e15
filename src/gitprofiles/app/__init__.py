"""Application services for gitprofiles."""
