#!/usr/bin/env python3
"""
FairMind backend entry point
"""

import uvicorn
from fairmind.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "fairmind.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
