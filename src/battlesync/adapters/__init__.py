"""Adapters connecting the synchronization core to external systems."""
