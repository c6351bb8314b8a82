"""Salon calendar scheduling engine and its hosts."""
