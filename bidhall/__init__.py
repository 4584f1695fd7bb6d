"""Timed single-room auction server."""
