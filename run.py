"""
Application Runner

Simple script to run the FastAPI application.
Usage: python run.py
"""

import uvicorn
from vector_ai.config.settings import settings

if __name__ == "__main__":
    uvicorn.run("vector_ai.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
