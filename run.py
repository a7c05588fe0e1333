#!/usr/bin/env python3
"""
Simple CLI launcher for the GameTorch client.
Use this if the 'gametorch' command isn't available.

Examples:
    python run.py animations generate "walking to the left" -b -i input.png -o walking.zip --duration 5
    python run.py animations get 1234
    python run.py help
"""
import sys
from gametorch.cli import main

if __name__ == "__main__":
    sys.exit(main())
