"""
Shared pytest configuration.

Log files are not written during tests.
"""
import os

os.environ.setdefault("BLOCKFORGE_FILE_LOGGING", "0")
