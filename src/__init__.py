"""
Word Blitz Points System - Core Package

This package contains the core modules for:
- Monthly points computation (src.points)
- Data ingestion and row normalization (src.ingestion)
- Shared configuration and utilities
"""

from src.config import *
