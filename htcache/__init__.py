"""
HTCache: In-Memory Cache with an HTTP Interface

A small key/value cache server built with FastAPI. Values are stored in
memory with an optional time-to-live and are reclaimed by a periodic
garbage collection task.
"""

__version__ = "0.1.0"
