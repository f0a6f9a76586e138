"""Environment configuration and logging helpers for the Odyssey manifester."""
