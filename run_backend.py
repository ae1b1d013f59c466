#!/usr/bin/env python
"""Script to run the Task Manager API server."""
import os
from pathlib import Path

# Run from the project root so the default sqlite path and .env resolve here
os.chdir(Path(__file__).resolve().parent)

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "taskmanager.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=True
    )
