"""Vercel entry point: imports the Flask app from the project root."""
import sys
import os

# web_editor.py and the qbuilder package live one directory up
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from web_editor import app  # noqa: F401  (Vercel detects `app`)
