#!/usr/bin/env python3
"""
Gator - Command-line RSS Aggregator
===================================

Launcher for running from a source checkout.

Usage:
    python main.py register alice
    python main.py addfeed "Hacker News" https://news.ycombinator.com/rss
    python main.py agg 1m
    python main.py browse 5
"""

import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from gator.cli import main


if __name__ == "__main__":
    main()
