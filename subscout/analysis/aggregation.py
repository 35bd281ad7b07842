"""Read-side aggregation over persisted insights.

Pain points are grouped by a title key produced by a TitleNormalizer.
The default normalizer is exact string equality, so "Login is broken" and
"login is broken!" are counted separately. Swap in CaseFoldTitleNormalizer
through the scan.title_normalizer setting to merge them.
"""

import json
import re
from collections import Counter
from typing import Iterable


class TitleNormalizer:
    """Maps an insight title to the key it is grouped under."""

    name = "base"

    def normalize(self, title: str) -> str:
        raise NotImplementedError


class ExactTitleNormalizer(TitleNormalizer):
    """Groups only byte-identical titles."""

    name = "exact"

    def normalize(self, title: str) -> str:
        return title


class CaseFoldTitleNormalizer(TitleNormalizer):
    """Groups titles that differ only in case, punctuation or spacing."""

    name = "casefold"

    _punctuation = re.compile(r"[^\w\s]")
    _whitespace = re.compile(r"\s+")

    def normalize(self, title: str) -> str:
        stripped = self._punctuation.sub("", title.casefold())
        return self._whitespace.sub(" ", stripped).strip()


_NORMALIZERS: dict[str, type[TitleNormalizer]] = {
    ExactTitleNormalizer.name: ExactTitleNormalizer,
    CaseFoldTitleNormalizer.name: CaseFoldTitleNormalizer,
}


def get_title_normalizer(name: str = "exact") -> TitleNormalizer:
    """Look up a normalizer by its config name."""
    try:
        return _NORMALIZERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown title normalizer '{name}'. "
            f"Available: {', '.join(sorted(_NORMALIZERS))}"
        )


def count_titles(
    titles: Iterable[str],
    normalizer: TitleNormalizer,
    limit: int = 10,
) -> list[dict]:
    """Group titles by normalized key and return the most frequent.

    The first title seen for a key is reported as its display title.
    """
    counts: Counter = Counter()
    display: dict[str, str] = {}

    for title in titles:
        key = normalizer.normalize(title)
        display.setdefault(key, title)
        counts[key] += 1

    return [
        {"title": display[key], "count": count}
        for key, count in counts.most_common(limit)
    ]


def decode_tags(tags_json: str | None) -> list | dict | None:
    """Decode a stored tags column, tolerating malformed JSON."""
    if not tags_json:
        return None
    try:
        return json.loads(tags_json)
    except (json.JSONDecodeError, TypeError):
        return None


def count_tags(tag_values: Iterable[list | dict | None], limit: int = 10) -> list[dict]:
    """Count tag occurrences across insight rows.

    Only list-shaped tags contribute. Objects such as the scan's
    {"source": "reddit_scan"} marker and missing tags are skipped. Every
    element of a list counts; non-string elements are keyed by their JSON
    text, so 3 and "3" share a count.
    """
    counts: Counter = Counter()
    for tags in tag_values:
        if not isinstance(tags, list):
            continue
        counts.update(tag if isinstance(tag, str) else json.dumps(tag) for tag in tags)

    return [{"tag": tag, "count": count} for tag, count in counts.most_common(limit)]
