"""Game domain services: sessions, lobby, and board rules.

This package contains pure domain logic that is driven by HTTP routes and
socket handlers, keeping transport concerns separated from core game
mechanics. Nothing in here performs I/O.
"""
