"""Entry point for ``python -m caption_formatter``."""

from caption_formatter.cli import main

if __name__ == "__main__":
    main()
