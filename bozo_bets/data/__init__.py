"""
Data layer for the bozo bets tracker.

- sources: third-party odds feeds with retry and circuit breaking
- cache: in-memory or Redis cache for fetched props
"""
