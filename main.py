"""
iMUSE Map Generator - Main Entry Point

Example usage:
    python main.py
    python main.py --config config/config.yaml music/
"""

from impgen.cli import main


if __name__ == "__main__":
    main()
