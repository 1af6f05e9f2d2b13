"""Liverty Music cloud provisioning."""
