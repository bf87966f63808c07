"""
Test Suite

Structure:
- tests/unit/: Tests for signing, dispatch, schemas and configuration (HTTP is mocked)

Uses pytest with pytest-asyncio for testing async functionality.
"""
