"""
Infrastructure Module

Redis connection lifecycle and the cache tiers built on it.
"""
