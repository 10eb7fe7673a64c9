"""Configuration handling for the gh-sync CLI."""
