#!/usr/bin/env python3
"""
Card Serial Reader - Entry Point

Run this script to start reading cards.
"""

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from console.app import main

if __name__ == "__main__":
    main()
