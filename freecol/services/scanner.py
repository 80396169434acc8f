"""Minimal argument lookup usable before the full option parser exists."""

from collections.abc import Sequence


def find_arg(option: str, args: Sequence[str]) -> str | None:
    """Return the value following the *last* occurrence of ``option``.

    Only the ``--option value`` form is recognised. Returns None when the
    option is absent or is the final argument.
    """
    for index in range(len(args) - 2, -1, -1):
        if args[index] == option:
            return args[index + 1]
    return None
