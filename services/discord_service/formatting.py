import math


def pct(value: float, digits: int = 1) -> str:
    return f"{value * 100:.{digits}f}%"


def ms(value: float) -> str:
    return f"{math.floor(value + 0.5)}ms"


def trend(current: float, previous: float | None) -> str:
    if not previous:
        return "—"

    percent = (current - previous) / abs(previous) * 100
    return f"{'+' if percent > 0 else ''}{percent:.1f}%"
