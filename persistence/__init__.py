"""
Persistence Module

Stores game state in a relational database (SQLite by default).

Components:
- database.py - Engine, session factory and database settings
- models.py - Table definitions
- store.py - Load/save operations used by the game loop
"""
