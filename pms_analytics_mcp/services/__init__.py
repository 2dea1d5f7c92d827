"""Registry, storage, sync and analytics services."""
