"""Configuration layer — the site config store, process settings, logging."""
