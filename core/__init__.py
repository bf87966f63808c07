"""
Core Package

Contains the exchange-agnostic building blocks of the client:
- config: Pydantic Settings loaded from environment / .env
- logging: Centralized logger setup
- errors: Typed exception hierarchy surfaced to callers
- schemas: Pydantic models for the response envelope, requests and responses
"""
