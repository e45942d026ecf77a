"""Module entrypoint for ``python -m dualpane``.

All argument parsing happens in ``dualpane.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
