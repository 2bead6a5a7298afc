"""
随机源

对战只需要 [0, 1) 的均匀抽样；抽象出来以便测试注入确定序列
"""
import random
from typing import Iterable, List, Optional


class RandomSource:
    """均匀随机源（默认基于 random.Random，可设种子复现）"""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def uniform(self) -> float:
        """
        抽取一个均匀随机数

        Returns:
            float: [0, 1) 区间的值
        """
        return self._rng.random()

    def hex_seed(self, digits: int = 8) -> str:
        """生成展示用的随机种子（形如 0x7a8f9b2c...），不占用 uniform 抽样"""
        value = self._rng.getrandbits(4 * digits)
        return f"0x{value:0{digits}x}..."


class ScriptedRandomSource(RandomSource):
    """
    按给定序列依次返回的随机源

    用于测试与回放；序列耗尽时抛出 IndexError
    """

    def __init__(self, values: Iterable[float]):
        super().__init__(seed=0)
        self._values: List[float] = []
        self.extend(values)
        self.consumed = 0

    def extend(self, values: Iterable[float]) -> None:
        for value in values:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"scripted value out of range [0, 1): {value}")
            self._values.append(value)

    @property
    def remaining(self) -> int:
        return len(self._values) - self.consumed

    def uniform(self) -> float:
        if self.consumed >= len(self._values):
            raise IndexError("scripted random source exhausted")
        value = self._values[self.consumed]
        self.consumed += 1
        return value
