"""Port definitions for gitprofiles."""
