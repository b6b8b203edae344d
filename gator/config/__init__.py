"""Process settings and the JSON user config."""
