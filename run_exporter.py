#!/usr/bin/env python3
"""
cassini exporter runner.

Convenience script to run the exporter from a source checkout.

Usage:
    python run_exporter.py

Or run as module:
    python -m cassini_exporter
"""

import sys
import os

# Add python directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'python'))

if __name__ == "__main__":
    from cassini_exporter.__main__ import main
    sys.exit(main())
