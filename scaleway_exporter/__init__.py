"""Prometheus exporter for Scaleway resources."""
