"""Command-line interface for declutter.

Commands are organised into modules by functionality:

- exec: Declutter a single URL into md, html or pdf
- repl: Interactive loop sharing one browser across many URLs
- convert: Render an existing markdown output to html or pdf
"""

# Import all command modules to register them with the app
from declutter.cli import (
    convert,  # noqa: F401
    exec,  # noqa: F401
    repl,  # noqa: F401
)
from declutter.cli._common import app

__all__ = ["app"]
