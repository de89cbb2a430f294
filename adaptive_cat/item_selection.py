"""
Item selection strategies for Computerized Adaptive Testing.

Every selector takes a working list of :class:`Stimulus` objects, removes the
chosen item from it and returns ``NextItem(next_stimulus, remaining_stimuli)``.
The working list is mutated in place; :meth:`Cat.find_next_item` decides
whether that list is a copy or the caller's own.

Strategies:
    mfi      Maximum Fisher information at the current theta. The remainder
             is returned sorted by difficulty so later closest/middle picks
             need no further sorting.
    closest  Item whose difficulty is nearest theta + 0.481, the difficulty at
             which a 2PL item gives roughly 60% success at the current theta.
    random   Uniform pick from the difficulty-sorted list.
    fixed    Items in input order.
    middle   Start-phase pick near the middle of the difficulty-sorted list,
             jittered by up to half the number of start items.

Randomized selectors draw from the ``random.Random`` owned by the calling Cat
so a fixed seed reproduces the whole sequence of picks.
"""

import bisect
import logging
import random
from typing import List, NamedTuple, Optional, Sequence

from adaptive_cat.item_response import fisher_information
from adaptive_cat.types import Stimulus

logger = logging.getLogger(__name__)

# Offset from theta to the difficulty of a ~60%-success 2PL item
CLOSEST_DIFFICULTY_OFFSET = 0.481


class NextItem(NamedTuple):
    """Selected item (None when the pool is empty) and what is left."""

    next_stimulus: Optional[Stimulus]
    remaining_stimuli: List[Stimulus]


def sort_by_difficulty(stimuli: List[Stimulus]) -> None:
    """Stable in-place sort by ascending difficulty."""
    stimuli.sort(key=lambda stimulus: stimulus.difficulty)


def find_closest(stimuli: Sequence[Stimulus], target: float) -> int:
    """
    Index of the item whose difficulty is nearest ``target``.

    Precondition: ``stimuli`` is sorted by ascending difficulty. The list is
    not re-sorted here and the result is meaningless if it is unsorted.

    An exact match returns that index. A target at or beyond either end
    returns the first or last index. Otherwise the nearer of the two
    straddling neighbours wins, with equal distances resolved toward the
    harder item.

    Raises:
        ValueError: If stimuli is empty.
    """
    if not stimuli:
        raise ValueError("Cannot search an empty list of stimuli")

    difficulties = [stimulus.difficulty for stimulus in stimuli]
    if target <= difficulties[0]:
        return 0
    if target >= difficulties[-1]:
        return len(difficulties) - 1

    high = bisect.bisect_left(difficulties, target)
    if difficulties[high] == target:
        return high

    low = high - 1
    if target - difficulties[low] < difficulties[high] - target:
        return low
    return high


def select_max_information(stimuli: List[Stimulus], theta: float) -> NextItem:
    """
    Pick the most informative item at ``theta``.

    Ties go to the item that appears first in ``stimuli``.
    """
    if not stimuli:
        return NextItem(None, [])

    information = [fisher_information(theta, stimulus.zeta) for stimulus in stimuli]
    best = max(range(len(stimuli)), key=information.__getitem__)
    selected = stimuli.pop(best)
    sort_by_difficulty(stimuli)

    logger.debug(
        f"MFI selection: theta={theta:.3f}, candidates={len(information)}, "
        f"selected b={selected.difficulty:.3f} (info={information[best]:.4f})"
    )
    return NextItem(selected, stimuli)


def select_closest(stimuli: List[Stimulus], theta: float) -> NextItem:
    """Pick the item nearest ``theta + CLOSEST_DIFFICULTY_OFFSET`` in difficulty."""
    if not stimuli:
        return NextItem(None, [])

    index = find_closest(stimuli, theta + CLOSEST_DIFFICULTY_OFFSET)
    return NextItem(stimuli.pop(index), stimuli)


def select_random(stimuli: List[Stimulus], rng: random.Random) -> NextItem:
    """Pick a uniformly random item."""
    if not stimuli:
        return NextItem(None, [])

    index = rng.randint(0, len(stimuli) - 1)
    return NextItem(stimuli.pop(index), stimuli)


def select_fixed(stimuli: List[Stimulus]) -> NextItem:
    """Pick the first item in input order."""
    if not stimuli:
        return NextItem(None, [])

    return NextItem(stimuli.pop(0), stimuli)


def select_middle(
    stimuli: List[Stimulus],
    rng: random.Random,
    n_start_items: int,
) -> NextItem:
    """
    Pick an item near the middle of a difficulty-sorted list.

    When the list holds at least ``n_start_items`` items the middle index is
    shifted by a random offset in ``[-n_start_items // 2, n_start_items // 2]``.
    The jittered index is clamped to the list.
    """
    if not stimuli:
        return NextItem(None, [])

    index = len(stimuli) // 2
    if len(stimuli) >= n_start_items:
        half_window = n_start_items // 2
        index += rng.randint(-half_window, half_window)
    index = min(max(index, 0), len(stimuli) - 1)

    return NextItem(stimuli.pop(index), stimuli)
