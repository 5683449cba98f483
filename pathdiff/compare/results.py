# Copyright Red Hat
#
# pathdiff/compare/results.py - Path diff comparison results
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Comparison result tallies.
"""
from collections import Counter
from typing import List

from pathdiff import PathdiffError

from .difftypes import Outcome


class CompareResults:
    """
    Tally of the outcomes of one top-level comparison.
    """

    def __init__(self):
        """
        Initialise a new, empty ``CompareResults`` object.
        """
        self._counts: Counter = Counter()
        #: Fatal errors collected under the ``collect`` error policy
        self.errors: List[PathdiffError] = []

    def __repr__(self) -> str:
        counts = ", ".join(f"{o.value}={self.count(o)}" for o in Outcome)
        return f"CompareResults({counts}, errors={len(self.errors)})"

    def __str__(self) -> str:
        return self.summary()

    def record(self, outcome: Outcome):
        """
        Record one comparison outcome.

        :param outcome: The outcome to record.
        :type outcome: ``Outcome``
        """
        self._counts[outcome] += 1

    def count(self, outcome: Outcome) -> int:
        """
        Return the number of times ``outcome`` was recorded.

        :param outcome: The outcome to count.
        :type outcome: ``Outcome``
        :returns: The count for ``outcome``.
        :rtype: ``int``
        """
        return self._counts[outcome]

    @property
    def compared(self) -> int:
        """
        The number of file pairs whose content was compared.
        """
        return self.count(Outcome.IDENTICAL) + self.count(Outcome.DIFFERS)

    @property
    def differences(self) -> int:
        """
        The number of recorded outcomes other than ``IDENTICAL``.
        """
        return sum(n for o, n in self._counts.items() if o != Outcome.IDENTICAL)

    @property
    def has_differences(self) -> bool:
        """
        ``True`` if any difference was found.
        """
        return self.differences > 0

    def summary(self) -> str:
        """
        Return a one-line human readable summary of the comparison.

        :returns: The summary string.
        :rtype: ``str``
        """
        compared = self.compared
        missing = self.count(Outcome.SOURCE_MISSING) + self.count(Outcome.DEST_MISSING)
        unmatched = self.count(Outcome.SOURCE_ONLY) + self.count(Outcome.DEST_ONLY)
        parts = [
            f"{compared} file{'s' if compared != 1 else ''} compared",
            f"{self.count(Outcome.DIFFERS)} differ",
            f"{unmatched} unmatched",
            f"{missing} missing",
            f"{self.count(Outcome.TYPE_MISMATCH)} type mismatches",
        ]
        if self.errors:
            parts.append(f"{len(self.errors)} errors")
        return ", ".join(parts)
