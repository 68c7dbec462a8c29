"""Exposition server and process lifetime."""
