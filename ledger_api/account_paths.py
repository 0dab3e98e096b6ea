"""
Hierarchical account paths.

Accounts are identified by colon-delimited paths such as
"Assets:Receivable:ShortTerm". A path has at most three segments.
Querying a parent path ("Assets") aggregates all of its children,
so account listings expand every path into its ancestors.
"""

from collections.abc import Iterable, Sequence

from ledger_api.errors import ValidationError

SEPARATOR = ":"
MAX_DEPTH = 3


def parse_path(value: str | Sequence[str]) -> list[str]:
    """
    Split an account path into its segments.

    Accepts "A:B:C" or ["A", "B", "C"]. Raises ValidationError
    for empty paths, blank segments, or more than MAX_DEPTH segments.
    """
    if isinstance(value, str):
        segments = value.split(SEPARATOR)
    else:
        segments = list(value)

    if not segments or all(not str(s).strip() for s in segments):
        raise ValidationError("Account path is empty")

    if len(segments) > MAX_DEPTH:
        raise ValidationError(
            f"Account path is too deep (maximum {MAX_DEPTH}): "
            f"{SEPARATOR.join(str(s) for s in segments)}"
        )

    cleaned = [str(s).strip() for s in segments]
    if any(not s for s in cleaned):
        raise ValidationError(
            f"Account path has a blank segment: {SEPARATOR.join(cleaned)}"
        )
    return cleaned


def join_path(segments: Sequence[str]) -> str:
    return SEPARATOR.join(segments)


def normalize_path(value: str | Sequence[str]) -> str:
    """Validate a path and return it in canonical "A:B:C" form."""
    return join_path(parse_path(value))


def ancestor_closure(path: str | Sequence[str]) -> set[str]:
    """Return the path and every prefix of it: A:B:C -> {A, A:B, A:B:C}."""
    segments = parse_path(path)
    return {
        join_path(segments[:depth])
        for depth in range(1, len(segments) + 1)
    }


def list_accounts(paths: Iterable[str]) -> list[str]:
    """Union of the ancestor closures of all paths, sorted."""
    accounts: set[str] = set()
    for path in paths:
        accounts |= ancestor_closure(path)
    return sorted(accounts)
