#!/usr/bin/env python3
"""
Repository Location Analyzer - Main Entry Point

Resolves hosted git repository locations into canonical catalog
entities.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from location_analyzer.cli import main

if __name__ == "__main__":
    main()
