"""
Clowder: a group of named Cats sharing one multi-construct corpus.

Each corpus item may carry separate IRT parameters for several cats. The
Clowder keeps track of which items have been seen, routes each response to
the cats the item has parameters for, consults an optional early-stopping
policy, and picks the next item for a requested cat.

Items with no parameters for any cat are "unvalidated". They can be piloted
by selecting for the reserved cat name ``"unvalidated"``, mixed into a
validated session at random, or used as a fallback once a cat has run out of
validated items.
"""

import copy
import logging
import numbers
import random
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from adaptive_cat.cat import Cat
from adaptive_cat.config import settings
from adaptive_cat.corpus import (
    check_no_duplicate_cat_names,
    filter_items_by_cat_parameter_availability,
)
from adaptive_cat.errors import ConfigurationError, UsageError
from adaptive_cat.schemas import CatInput, validate_input
from adaptive_cat.stopping_rules import EarlyStopping
from adaptive_cat.types import (
    EstimationMethod,
    ItemSelectMethod,
    MultiZetaStimulus,
    MultiZetaStimulusLike,
    as_multi_zeta_stimulus,
)
from adaptive_cat.zeta import Zeta, ZetaLike

logger = logging.getLogger(__name__)

UNVALIDATED_CAT_NAME = "unvalidated"

STOP_REASON_EARLY_STOPPING = "Early stopping"
STOP_REASON_NO_UNVALIDATED_ITEMS = "No unvalidated items remaining"
STOP_REASON_NO_ITEMS = "No items remaining"


class Clowder:
    """
    Multi-construct adaptive testing session.

    Args:
        cats: Map of cat name to Cat configuration (a CatInput or a plain dict).
        corpus: Items as MultiZetaStimulus objects or their record form.
        random_seed: Seed of the Clowder's random source, also used for the
            reserved unvalidated cat.
        early_stopping: Optional early-stopping policy.

    Raises:
        ConfigurationError: If a cat configuration is invalid, a cat is named
            "unvalidated", or an item names a cat in two parameter groups.
    """

    def __init__(
        self,
        cats: Mapping[str, Union[CatInput, Mapping[str, Any]]],
        corpus: Sequence[MultiZetaStimulusLike],
        random_seed: Optional[Union[str, int]] = None,
        early_stopping: Optional[EarlyStopping] = None,
    ):
        if UNVALIDATED_CAT_NAME in cats:
            raise ConfigurationError(
                f"'{UNVALIDATED_CAT_NAME}' is a reserved cat name and may not be used."
            )

        parsed_corpus = [as_multi_zeta_stimulus(item) for item in corpus]
        check_no_duplicate_cat_names(parsed_corpus)
        if any(item.has_cat(UNVALIDATED_CAT_NAME) for item in parsed_corpus):
            raise ConfigurationError(
                f"'{UNVALIDATED_CAT_NAME}' is a reserved cat name and may not "
                "appear in the corpus."
            )

        seed = random_seed if random_seed is not None else settings.DEFAULT_RANDOM_SEED

        self._cats: Dict[str, Cat] = {
            name: Cat.from_input(validate_input(CatInput, config))
            for name, config in cats.items()
        }
        self._cats[UNVALIDATED_CAT_NAME] = Cat(
            item_select=ItemSelectMethod.RANDOM, random_seed=seed
        )

        self._corpus = parsed_corpus
        self._remaining_items: List[MultiZetaStimulus] = copy.deepcopy(parsed_corpus)
        self._seen_items: List[MultiZetaStimulus] = []
        self._rng = random.Random(seed)
        self._early_stopping = early_stopping
        self._stopping_reason: Optional[str] = None

        logger.info(
            f"Clowder initialized with cats {list(self.cats)} and "
            f"{len(parsed_corpus)} corpus items"
        )

    # ── Accessors ──

    @property
    def cats(self) -> Dict[str, Cat]:
        """Named cats, without the reserved unvalidated cat."""
        return {
            name: cat for name, cat in self._cats.items() if name != UNVALIDATED_CAT_NAME
        }

    @property
    def corpus(self) -> List[MultiZetaStimulus]:
        return list(self._corpus)

    @property
    def remaining_items(self) -> List[MultiZetaStimulus]:
        """Corpus items that have not been seen yet."""
        return list(self._remaining_items)

    @property
    def seen_items(self) -> List[MultiZetaStimulus]:
        return list(self._seen_items)

    @property
    def theta(self) -> Dict[str, float]:
        return {name: cat.theta for name, cat in self.cats.items()}

    @property
    def se_measurement(self) -> Dict[str, float]:
        return {name: cat.se_measurement for name, cat in self.cats.items()}

    @property
    def n_items(self) -> Dict[str, int]:
        return {name: cat.n_items for name, cat in self.cats.items()}

    @property
    def resps(self) -> Dict[str, List[int]]:
        return {name: cat.resps for name, cat in self.cats.items()}

    @property
    def zetas(self) -> Dict[str, List[Zeta]]:
        return {name: cat.zetas for name, cat in self.cats.items()}

    @property
    def early_stopping(self) -> Optional[EarlyStopping]:
        return self._early_stopping

    @property
    def stopping_reason(self) -> Optional[str]:
        """Why the last selection returned no item, if it did."""
        return self._stopping_reason

    # ── Updates ──

    def _validate_cat_name(self, cat_name: str, allow_unvalidated: bool = False) -> None:
        if cat_name in self.cats or (
            allow_unvalidated and cat_name == UNVALIDATED_CAT_NAME
        ):
            return
        raise UsageError(
            f"Invalid Cat name. Expected one of {', '.join(self.cats)}. "
            f"Received {cat_name}."
        )

    def update_ability_estimates(
        self,
        cat_names: Sequence[str],
        zeta: Union[ZetaLike, Sequence[ZetaLike]],
        answer: Union[int, Sequence[int]],
        method: Optional[Union[str, EstimationMethod]] = None,
    ) -> None:
        """
        Update the named cats with the same item parameters and answers.

        Raises:
            UsageError: If a cat name is unknown (checked before any update).
        """
        for cat_name in cat_names:
            self._validate_cat_name(cat_name)
        for cat_name in cat_names:
            self._cats[cat_name].update_ability_estimate(zeta, answer, method)

    def update_cat_and_get_next_item(
        self,
        cat_to_select: str,
        cats_to_update: Union[str, Sequence[str]] = (),
        items: Union[MultiZetaStimulusLike, Sequence[MultiZetaStimulusLike]] = (),
        answers: Union[int, Sequence[int]] = (),
        method: Optional[Union[str, EstimationMethod]] = None,
        item_select: Optional[Union[str, ItemSelectMethod]] = None,
        randomly_select_unvalidated: bool = False,
        return_undefined_on_exhaustion: bool = True,
        corpus_to_select_from: Optional[str] = None,
    ) -> Optional[MultiZetaStimulus]:
        """
        Record the latest responses and pick the next item for ``cat_to_select``.

        Steps:
            1. Validate cat names and that items and answers line up.
            2. Move ``items`` from remaining to seen and update each cat in
               ``cats_to_update`` with the items it has parameters for.
            3. Consult the early-stopping policy. Once it has stopped, no
               further items are returned.
            4. Select among remaining items that have parameters for
               ``corpus_to_select_from`` (default: ``cat_to_select``), using
               ``cat_to_select``'s theta and selection method. Selecting for
               "unvalidated" picks a random item without parameters for any cat.
            5. Optionally interleave unvalidated items, with probability equal
               to their share of the remaining pool.
            6. When no validated items remain, return None or fall back to a
               random unvalidated item.

        Args:
            cat_to_select: Cat to select for, or "unvalidated".
            cats_to_update: Cat name or names to update with ``items``.
            items: Item or items the participant just answered.
            answers: Matching answer or answers (0 or 1).
            method: Estimator override for the update.
            item_select: Selection method override.
            randomly_select_unvalidated: Mix unvalidated items into selection.
            return_undefined_on_exhaustion: When validated items run out,
                return None instead of a random unvalidated item.
            corpus_to_select_from: Cat whose parameters define the pool.

        Returns:
            The next item, or None with :attr:`stopping_reason` set.

        Raises:
            UsageError: On unknown cat names or mismatched items and answers.
            ZetaValidationError: If an item's parameters are invalid.
        """
        # ── Validate ──
        self._validate_cat_name(cat_to_select, allow_unvalidated=True)
        if isinstance(cats_to_update, str):
            cats_to_update = [cats_to_update]
        for cat_name in cats_to_update:
            self._validate_cat_name(cat_name)
        select_corpus = corpus_to_select_from or cat_to_select
        self._validate_cat_name(
            select_corpus, allow_unvalidated=select_corpus == cat_to_select
        )

        if isinstance(items, (MultiZetaStimulus, Mapping)):
            items = [items]
        item_list = [as_multi_zeta_stimulus(item) for item in items]
        answer_list = [answers] if isinstance(answers, numbers.Integral) else list(answers)

        if len(item_list) != len(answer_list):
            raise UsageError("Previous items and answers must have the same length.")
        for value in answer_list:
            if value not in (0, 1):
                raise UsageError(f"Answers must be 0 or 1, got {value!r}")

        # ── Update ──
        self._seen_items.extend(item_list)
        self._remaining_items = [
            item for item in self._remaining_items if item not in item_list
        ]

        for cat_name in cats_to_update:
            pairs = [
                (item.zeta_for(cat_name), value)
                for item, value in zip(item_list, answer_list)
                if item.has_cat(cat_name)
            ]
            if pairs:
                zetas, cat_answers = zip(*pairs)
                self._cats[cat_name].update_ability_estimate(
                    list(zetas), list(cat_answers), method
                )

        # ── Early stopping ──
        if self._early_stopping is not None:
            self._early_stopping.update(self.cats, cat_to_select)
            if self._early_stopping.early_stop:
                return self._stop(STOP_REASON_EARLY_STOPPING, cat_to_select)

        self._stopping_reason = None

        # ── Select ──
        if cat_to_select == UNVALIDATED_CAT_NAME:
            unvalidated = [item for item in self._remaining_items if item.is_unvalidated]
            if not unvalidated:
                return self._stop(STOP_REASON_NO_UNVALIDATED_ITEMS, cat_to_select)
            return self._random_item(unvalidated)

        available, missing = filter_items_by_cat_parameter_availability(
            self._remaining_items, select_corpus
        )
        if select_corpus != cat_to_select:
            missing = [item for item in missing if not item.has_cat(cat_to_select)]

        if not available:
            if not self._remaining_items:
                return self._stop(STOP_REASON_NO_ITEMS, cat_to_select)
            if return_undefined_on_exhaustion or not missing:
                return self._stop(
                    f"No validated items remaining for specified corpus {select_corpus}",
                    cat_to_select,
                )
            return self._random_item(missing)

        next_item = self._select_validated(
            cat_to_select, select_corpus, available, item_select
        )

        if missing and randomly_select_unvalidated:
            unvalidated_share = len(missing) / (len(available) + len(missing))
            if self._rng.random() < unvalidated_share:
                return self._random_item(missing)

        return next_item

    # ── Selection helpers ──

    def _select_validated(
        self,
        cat_to_select: str,
        select_corpus: str,
        available: List[MultiZetaStimulus],
        item_select: Optional[Union[str, ItemSelectMethod]],
    ) -> Optional[MultiZetaStimulus]:
        """Let ``cat_to_select`` pick among ``available`` using ``select_corpus`` parameters."""
        candidates = [item.to_stimulus(select_corpus) for item in available]
        originals = {id(stimulus): item for stimulus, item in zip(candidates, available)}

        next_stimulus, _ = self._cats[cat_to_select].find_next_item(
            candidates, item_select, deep_copy=False
        )
        if next_stimulus is None:
            return None
        return originals[id(next_stimulus)]

    def _random_item(self, pool: List[MultiZetaStimulus]) -> MultiZetaStimulus:
        return pool[self._rng.randint(0, len(pool) - 1)]

    def _stop(self, reason: str, cat_name: str) -> Optional[MultiZetaStimulus]:
        self._stopping_reason = reason
        logger.info(
            f"No item selected for '{cat_name}': {reason}",
            extra={"cat_name": cat_name, "stop_reason": reason},
        )
        return None
