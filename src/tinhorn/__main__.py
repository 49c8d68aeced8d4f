"""Entry point for running tinhorn as a module.

Usage:
    python -m tinhorn [command] [options]

Example:
    python -m tinhorn render page.html --data page.yaml
    python -m tinhorn check page.html
"""

from tinhorn.cli import app

if __name__ == "__main__":
    app()
