"""Test fixtures for the file agent explorer.

This package provides reusable test fixtures:
- agent: An in-memory fake file agent served by FastAPI, plus clients and
  sessions wired to it through httpx's ASGITransport
- audio: Encoded audio payloads generated with numpy and soundfile
- hooks: A RenderHooks implementation that records every call
"""
