"""
SpotiKeep Test Suite
"""
