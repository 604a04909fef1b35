#!/usr/bin/env python
"""
Serve the travel engine API with uvicorn.

Usage:
    python scripts/run_api.py [--no-reload]

Environment:
    TRAVEL_ENGINE_PORT      port to bind (default 8000)
    TRAVEL_ENGINE_DATA_DIR  directory with the seed CSVs
"""
import os
import subprocess
import sys
from pathlib import Path

APP = "travel_engine.api.main:app"


def main():
    src_path = Path(__file__).parent.parent / 'src'
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(src_path), env.get("PYTHONPATH")]))

    port = env.get("TRAVEL_ENGINE_PORT", "8000")
    cmd = [sys.executable, "-m", "uvicorn", APP, "--host", "0.0.0.0", "--port", port]
    if "--no-reload" not in sys.argv[1:]:
        cmd.append("--reload")

    print(f"Serving {APP} on port {port}")
    try:
        subprocess.run(cmd, env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
