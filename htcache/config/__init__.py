"""Configuration for HTCache."""
