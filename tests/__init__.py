"""
Test suite for madhava

Contains:
- tests/unit/          : Unit tests for individual modules
"""
