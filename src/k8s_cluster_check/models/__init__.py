"""Data models for the cluster health check."""
