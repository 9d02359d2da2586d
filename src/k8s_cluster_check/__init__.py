"""Kubernetes cluster health check plugin for Icinga/Nagios."""

__version__ = "1.0.0"
