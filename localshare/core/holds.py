from collections import Counter


class HoldCounter:
    """
    Per-artifact counter of viewer holds, modelled on Go's sync.WaitGroup.

    A hold is a referent that is not a recipient: while any hold exists on
    an artifact its handle must stay live.

    Example:
        ```python
        holds = HoldCounter()

        holds.add("art_1")
        assert holds.count("art_1") == 1

        holds.done("art_1")
        if holds.count("art_1") == 0:
            # Safe to release
            ...
        ```
    """

    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()

    def add(self, artifact_id: str, n: int = 1) -> int:
        """
        Take `n` holds on an artifact.

        Returns:
            The new hold count.

        Raises:
            ValueError: If n is not a strictly positive integer.
        """
        if n <= 0:
            msg = "'n' must be a strictly positive integer."
            raise ValueError(msg)
        self._counts[artifact_id] += n
        return self._counts[artifact_id]

    def done(self, artifact_id: str) -> int:
        """Drop one hold. No-op if none is held. Returns the remaining count."""
        if self._counts[artifact_id] <= 1:
            del self._counts[artifact_id]
            return 0
        self._counts[artifact_id] -= 1
        return self._counts[artifact_id]

    def count(self, artifact_id: str) -> int:
        return self._counts.get(artifact_id, 0)

    def clear(self) -> None:
        self._counts.clear()

    def __contains__(self, artifact_id: object) -> bool:
        return artifact_id in self._counts

    def __len__(self) -> int:
        """Number of artifacts with at least one hold."""
        return len(self._counts)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({dict(self._counts)})"
