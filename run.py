#!/usr/bin/env python3
"""
Run script for the Request Analytics demo application
"""
import uvicorn

from request_analytics.config.settings import settings
from request_analytics.main import create_app

if __name__ == "__main__":
    uvicorn.run(create_app(), host=settings.host, port=settings.port)
