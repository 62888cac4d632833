"""Readings extraction, retry and provisioning services."""
