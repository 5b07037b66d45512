"""Time-sorted cue sequence with active-cue lookup"""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import NoCuesFound
from .subtitle_parser import Cue

logger = logging.getLogger(__name__)


class CueStore:
    """
    Immutable, start-time ordered sequence of cues.

    Build with CueStore.build(); the constructor expects cues that are
    already validated and sorted.
    """

    __slots__ = ("_cues",)

    def __init__(self, cues: Tuple[Cue, ...]):
        self._cues = cues

    @classmethod
    def build(cls, cues: Iterable[Cue]) -> "CueStore":
        """
        Validate and sort parsed cues.

        Cues whose start time is after their end time are dropped. The sort is
        stable, so cues sharing a start time keep their parse order.

        Raises:
            NoCuesFound: If no valid cues remain
        """
        valid = []
        for position, cue in enumerate(cues):
            if cue.start_time > cue.end_time:
                logger.warning(
                    f"Cue {cue.index if cue.index is not None else position}: "
                    f"start ({cue.start_time}s) > end ({cue.end_time}s), skipping"
                )
                continue
            valid.append(cue)

        if not valid:
            raise NoCuesFound("No subtitle cues found")

        valid.sort(key=lambda c: c.start_time)
        logger.debug(f"Built cue store with {len(valid)} cues")
        return cls(tuple(valid))

    @property
    def cues(self) -> Tuple[Cue, ...]:
        return self._cues

    @property
    def first_start(self) -> float:
        return self._cues[0].start_time

    @property
    def last_end(self) -> float:
        return max(c.end_time for c in self._cues)

    def __len__(self) -> int:
        return len(self._cues)

    def __iter__(self) -> Iterator[Cue]:
        return iter(self._cues)

    def __getitem__(self, position: int) -> Cue:
        return self._cues[position]

    def __eq__(self, other) -> bool:
        if not isinstance(other, CueStore):
            return NotImplemented
        return self._cues == other._cues

    def __repr__(self) -> str:
        return f"CueStore({len(self._cues)} cues)"

    def to_list(self) -> List[dict]:
        return [c.to_dict() for c in self._cues]

    def _search(self, time: float) -> Optional[int]:
        left, right = 0, len(self._cues) - 1
        while left <= right:
            mid = (left + right) // 2
            cue = self._cues[mid]
            if time < cue.start_time:
                right = mid - 1
            elif time > cue.end_time:
                left = mid + 1
            else:
                return mid
        return None

    def locate(self, time: float, hint: Optional[int] = None) -> Optional[int]:
        """
        Position of a cue active at time, or None.

        During forward playback the active cue is usually the previous one or
        the one after it, so the hinted position and its successor are tried
        before falling back to binary search.
        """
        if hint is not None and 0 <= hint < len(self._cues):
            if self._cues[hint].contains(time):
                return hint
            following = hint + 1
            if following < len(self._cues) and self._cues[following].contains(time):
                return following
        return self._search(time)

    def active_cue_at(self, time: float) -> Optional[Cue]:
        """
        Cue whose [start_time, end_time] range contains time, or None.

        Binary search over the start-time ordering. When cues overlap, which
        of the active cues is returned depends on where the search lands;
        a long cue overlapping later ones may also be missed.
        """
        position = self._search(time)
        return self._cues[position] if position is not None else None
