"""
ABOUTME: Batch string edits computed against one fixed snapshot
ABOUTME: Patches are validated non-overlapping and applied back-to-front
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Patch:
    """Replace source[start:end] with replacement (start == end inserts)"""
    start: int
    end: int
    replacement: str


class PatchList:
    """
    Collects (start, end, replacement) edits for one source string.

    All offsets refer to the string passed to apply(). Applying in
    descending start order keeps every lower offset valid while the
    string grows or shrinks behind it. Insertions at the same offset
    keep the order in which they were added and land before a
    replacement that starts there.
    """

    def __init__(self):
        self._patches: List[Patch] = []

    def __len__(self) -> int:
        return len(self._patches)

    def __bool__(self) -> bool:
        return bool(self._patches)

    @property
    def patches(self) -> List[Patch]:
        return list(self._patches)

    def replace(self, start: int, end: int, replacement: str) -> None:
        """
        Add a replacement of [start, end).

        Raises:
            ValueError: If the range is inverted or overlaps an existing patch
        """
        if start < 0 or end < start:
            raise ValueError(f"Invalid patch range [{start}, {end})")
        for patch in self._patches:
            if start < patch.end and patch.start < end:
                raise ValueError(
                    f"Patch [{start}, {end}) overlaps [{patch.start}, {patch.end})"
                )
        self._patches.append(Patch(start, end, replacement))

    def insert(self, pos: int, text: str) -> None:
        self.replace(pos, pos, text)

    def apply(self, source: str) -> str:
        """
        Apply all patches to source and return the new string.

        Raises:
            ValueError: If a patch lies beyond the end of source
        """
        if not self._patches:
            return source

        ordered = sorted(
            enumerate(self._patches),
            key=lambda item: (item[1].start, item[1].end, item[0]),
            reverse=True,
        )
        result = source
        for _, patch in ordered:
            if patch.end > len(source):
                raise ValueError(
                    f"Patch [{patch.start}, {patch.end}) exceeds source length {len(source)}"
                )
            result = result[:patch.start] + patch.replacement + result[patch.end:]
        return result
