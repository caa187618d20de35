"""Webhook server for commitpost."""

from commitpost.server.app import create_app


__all__ = ["create_app"]
