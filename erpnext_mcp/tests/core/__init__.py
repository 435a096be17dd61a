"""Unit tests for core domain logic.

These tests exercise core logic without external dependencies.
"""
