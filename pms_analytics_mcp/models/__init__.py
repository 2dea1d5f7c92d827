"""Connection and canonical record models."""
