"""Scrape-time collectors for Scaleway resource families."""
