"""Session parsing and the admin gate."""
