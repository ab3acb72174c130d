"""
Engram CLI entrypoint.

Executed via:
  python -m engram

Assumes dependencies are installed in an isolated environment.
"""

from engram.cli.app import app

if __name__ == "__main__":
    app()
