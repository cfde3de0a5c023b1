#!/usr/bin/env python3
import uvicorn
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from gitsmart.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "gitsmart.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.lower()
    )
