#!/usr/bin/env python3
"""
Development runner for The Rat and The Time game server.
"""
import uvicorn
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from persistence.database import DatabaseSettings
from server.config import settings_summary, get_settings

if __name__ == "__main__":
    settings = get_settings()

    print("Starting The Rat and The Time - Game Server")
    print(f"Host: {settings.host}:{settings.port}")
    print(f"Debug: {settings.debug}")
    print(f"Database: {DatabaseSettings().url}")
    print(f"Entities: {settings_summary(settings)}")
    print("-" * 50)

    uvicorn.run(
        "server.service:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info" if settings.debug else "warning"
    )
