"""Periodic ingestion of device readings."""
