#!/usr/bin/env python3
"""
Development server starter for HouseholdHub.
Runs uvicorn with reload from the project root.
"""

import uvicorn
import os
import sys

if __name__ == "__main__":
    script_dir = os.path.dirname(os.path.abspath(__file__))
    os.chdir(script_dir)
    sys.path.insert(0, script_dir)

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    print(f"🚀 Starting HouseholdHub API from: {script_dir}")
    print(f"📡 Server will be available at: http://localhost:{port}")
    print(f"📄 API docs will be available at: http://localhost:{port}/docs")
    print(f"🔌 Realtime socket: ws://localhost:{port}/ws?token=<access token>")

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=True,
        reload_dirs=["./app"],
    )
