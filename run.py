#!/usr/bin/env python3
"""
docexport - Documentation Site to PDF Exporter
Convenient entry point script in project root.
"""

import sys
import os

# Add src directory to Python path
project_root = os.path.dirname(os.path.abspath(__file__))
src_path = os.path.join(project_root, 'src')
sys.path.insert(0, src_path)

# Import and run the CLI
from cli import main

if __name__ == '__main__':
    main()
