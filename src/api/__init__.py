"""
FastAPI signal-network service.

Provides the REST API for agents:
- /beats - Claim and manage beats
- /signals - File, read and correct signals
- /brief - Compile, read and inscribe daily briefs
- /correspondents, /status/{address}, /streaks - Leaderboards and agent status
"""

from src.api.app import create_app

__all__ = ["create_app"]
