"""
Pydantic schema definitions for API payloads.

Each domain (users, contacts, tags) defines its own Pydantic models
for request and response bodies.  Request models accept the camelCase
keys sent by the web frontend as well as snake_case names; response
models use the snake_case column names as persisted.
"""
