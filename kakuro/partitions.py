from rules.rules import MAX_VALUE, MIN_VALUE


PartitionKey = tuple[int, int, int, int]


def partition_values(total: int, slots: int, min_value: int = MIN_VALUE, max_value: int = MAX_VALUE) -> frozenset[int]:
    """Return every value used by some set of ``slots`` distinct integers in
    ``[min_value, max_value]`` that sums to ``total``.

    An empty result means no such combination exists.
    """
    if slots < 1:
        raise ValueError("slots must be at least 1")
    if min_value > max_value:
        raise ValueError("min_value must not exceed max_value")

    values: set[int] = set()
    for combination in _combinations(total, slots, min_value, max_value):
        if len(combination) == slots and len(set(combination)) == slots:
            values.update(combination)
    return frozenset(values)


def _combinations(total: int, slots: int, min_value: int, max_value: int) -> list[list[int]]:
    # members are produced largest first, each strictly below the previous one
    if slots == 1:
        if min_value <= total <= max_value:
            return [[total]]
        return []

    # with non-negative members the largest one can never exceed the total
    upper = min(total, max_value) if min_value >= 0 else max_value

    combinations: list[list[int]] = []
    for largest in range(upper, min_value - 1, -1):
        for rest in _combinations(total - largest, slots - 1, min_value, largest - 1):
            combinations.append(rest + [largest])
    return combinations


class PartitionCache:
    """Memoizes ``partition_values`` for the lifetime of one solve.

    Keys are the four scalar inputs; entries are never evicted since the
    digit range keeps the key space small.
    """

    def __init__(self) -> None:
        self._values: dict[PartitionKey, frozenset[int]] = {}
        self.hits = 0
        self.misses = 0

    def values(self, total: int, slots: int, min_value: int = MIN_VALUE, max_value: int = MAX_VALUE) -> frozenset[int]:
        key = (total, slots, min_value, max_value)
        cached = self._values.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        result = partition_values(total, slots, min_value, max_value)
        self._values[key] = result
        return result

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values
