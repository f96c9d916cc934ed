"""
Server Module

This module runs the game as an HTTP service.

Components:
- service.py - FastAPI application factory and routes
- loop.py - Scheduled ticking, saving and command serialization
- config.py - Configuration management for the server
"""
