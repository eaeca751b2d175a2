"""
Main application entry point for the exam practice service.

Usage:
    - ASGI server: uvicorn englishtutor.main:app
    - Script: python -m englishtutor.scripts.run_server
"""

from englishtutor import create_app

app = create_app()
