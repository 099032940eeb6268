"""
Main entry point for running invoice_desk as a module.

Usage:
    python -m invoice_desk [command] [options]
"""
import sys

from .cli import main

sys.exit(main())
