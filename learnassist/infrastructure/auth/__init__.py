"""Credential persistence and auth gateways."""
