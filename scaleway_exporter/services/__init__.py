"""Clients for the Scaleway REST and S3 APIs."""
