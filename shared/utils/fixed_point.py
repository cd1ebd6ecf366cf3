"""定点数运算：带溢出检查的 `(x * mul) / div`。

约定
----
- 价格/成交量统一使用整数定点表示（隐含 6 位小数，见 `FIXED_POINT_ONE`）。
- 乘法在两倍位宽的中间表示里完成，再收窄回目标位宽；任何一步越界都返回 None，
  由调用方转换成具名错误（不在这里抛异常，也不静默回绕）。
"""

from __future__ import annotations

FIXED_POINT_DECIMALS = 6
FIXED_POINT_ONE = 10**FIXED_POINT_DECIMALS

U64_MAX = 2**64 - 1
I256_MIN = -(2**255)
I256_MAX = 2**255 - 1


def _unsigned_max(bits: int) -> int:
    return 2**bits - 1


def _signed_bounds(bits: int) -> tuple[int, int]:
    return -(2 ** (bits - 1)), 2 ** (bits - 1) - 1


def fits_unsigned(value: int, bits: int = 64) -> bool:
    return 0 <= value <= _unsigned_max(bits)


def fits_signed(value: int, bits: int = 256) -> bool:
    lo, hi = _signed_bounds(bits)
    return lo <= value <= hi


def mul_div_unsigned(x: int, mul: int, div: int, bits: int = 64) -> int | None:
    """无符号 `floor(x * mul / div)`。

    Parameters
    ----------
    x, mul, div:
        非负整数，且都必须落在 `bits` 位无符号范围内。
    bits:
        目标位宽；中间结果使用 `2 * bits` 位。

    Returns
    -------
    int | None
        结果；越界、除零或输入非法时返回 None。
    """
    if not (fits_unsigned(x, bits) and fits_unsigned(mul, bits) and fits_unsigned(div, bits)):
        return None
    if div == 0:
        return None
    product = x * mul
    if not fits_unsigned(product, 2 * bits):
        return None
    out = product // div
    if not fits_unsigned(out, bits):
        return None
    return out


def mul_div_signed(x: int, mul: int, div: int, bits: int = 256) -> int | None:
    """有符号 `(x * mul) / div`，向零截断。

    符号在扩宽过程中保持不变：`mul_div_signed(-x, m, d) == -mul_div_signed(x, m, d)`。
    收窄越界返回 None。
    """
    if not (fits_signed(x, bits) and fits_signed(mul, bits) and fits_signed(div, bits)):
        return None
    if div == 0:
        return None
    product = x * mul
    if not fits_signed(product, 2 * bits):
        return None
    negative = (product < 0) != (div < 0)
    out = abs(product) // abs(div)
    if negative:
        out = -out
    if not fits_signed(out, bits):
        return None
    return out


def mul_div_u64(x: int, mul: int, div: int) -> int | None:
    return mul_div_unsigned(x, mul, div, bits=64)


def mul_div_i256(x: int, mul: int, div: int) -> int | None:
    return mul_div_signed(x, mul, div, bits=256)


# 默认入口：64 位无符号
mul_div = mul_div_u64
