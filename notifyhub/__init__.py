"""Realtime notifications and daily reminder digests."""
