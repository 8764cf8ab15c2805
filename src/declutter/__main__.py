"""Allow ``python -m declutter``."""

from declutter.cli import app

if __name__ == "__main__":
    app()
