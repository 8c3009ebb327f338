"""Domain services used by the HTTP blueprints."""
