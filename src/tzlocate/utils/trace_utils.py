"""Exception formatting helpers"""


def str_exc(exc: BaseException) -> str:
    """Convert an exception to its string representation."""
    return f"{type(exc).__name__}: {exc}"


def str_exc_chain(exc: BaseException) -> str:
    """Render an exception and its ``__cause__`` chain, outermost first."""
    parts = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        parts.append(str_exc(current))
        current = current.__cause__
    return " <- ".join(parts)
