"""Các phép tính chỉ số dùng chung cho báo cáo."""

import math
from typing import Iterable


def round_half_up(value: float) -> int:
    """Làm tròn .5 lên trên (giống `Math.round`), khác với `round()` của Python."""
    return int(math.floor(value + 0.5))


def percent(numerator: float, denominator: float) -> int:
    """Tỷ lệ phần trăm làm tròn; trả về 0 khi mẫu số bằng 0."""
    if not denominator or denominator <= 0:
        return 0
    return round_half_up(numerator / denominator * 100)


def mean_rounded(values: Iterable[float]) -> int:
    values = list(values)
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))
