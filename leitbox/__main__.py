"""
Entry point for running leitbox as a module.

Usage:
    python -m leitbox intervals
    python -m leitbox demo
    python -m leitbox --help
"""
from .cli import main

if __name__ == "__main__":
    main()
