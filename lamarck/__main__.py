"""Package entry point for ``python -m lamarck``.

RULES:
- This file must exist for ``python -m lamarck`` to work
- Delegates straight to lamarck.cli.main()
"""

from lamarck.cli import main

if __name__ == "__main__":
    main()
