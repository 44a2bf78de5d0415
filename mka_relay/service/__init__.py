"""Relay backend proxy (FastAPI)."""
