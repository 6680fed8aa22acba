"""
Fuzzy matching for the profile selector.

A query matches a candidate when its characters appear in the candidate's
sort key in order, ignoring case. Among the possible alignments the best one
is scored, rewarding:

- contiguous runs of matched characters (gaps cost points)
- matches that start near the beginning of the text
- characters that land on a word start (after "-", "_", ".", "/", ":" or a
  space, or on a lower-to-upper case transition)
- an exact, whole-string match
"""

from collections import namedtuple

Candidate = namedtuple("Candidate", ["display_text", "sort_key"])
RankedCandidate = namedtuple("RankedCandidate", ["candidate", "score"])

BASELINE_SCORE = 0
SCORE_MATCH = 16
BONUS_BOUNDARY = 8
BONUS_CONSECUTIVE = 4
BONUS_EXACT = 32
PENALTY_GAP = 1
PENALTY_LEADING = 1

WORD_SEPARATORS = "-_./: "


def candidates_from_profiles(profiles):
    """Build selector candidates from Profile records, keeping their order."""
    return [Candidate(profile.display(), profile.name) for profile in profiles]


def _is_word_start(text, index):
    if index == 0:
        return True
    previous, current = text[index - 1], text[index]
    if previous in WORD_SEPARATORS:
        return True
    if previous.islower() and current.isupper():
        return True
    return previous.isalpha() and current.isdigit()


def _fold(value):
    return [char.lower()[:1] for char in value]


def score(text, query):
    """
    Score query against text.

    Args:
        text: Candidate string to search in
        query: Characters typed so far

    Returns:
        int score (higher is better), or None if query is not a
        case-insensitive subsequence of text. An empty query scores
        BASELINE_SCORE against every text.
    """
    if not query:
        return BASELINE_SCORE

    # Folded per character so indices stay aligned with text
    haystack = _fold(text)
    needle = _fold(query)
    if len(needle) > len(haystack):
        return None

    # best[i]: best score of an alignment of needle[:j + 1] whose last
    # character sits at haystack[i]
    best = None
    for j, char in enumerate(needle):
        row = [None] * len(haystack)
        for i in range(j, len(haystack)):
            if haystack[i] != char:
                continue
            gain = SCORE_MATCH
            if _is_word_start(text, i):
                gain += BONUS_BOUNDARY

            if j == 0:
                row[i] = gain - PENALTY_LEADING * i
                continue

            linked = None
            for k in range(j - 1, i):
                if best[k] is None:
                    continue
                if k == i - 1:
                    value = best[k] + BONUS_CONSECUTIVE
                else:
                    value = best[k] - PENALTY_GAP * (i - k - 1)
                if linked is None or value > linked:
                    linked = value
            if linked is not None:
                row[i] = linked + gain
        best = row

    ends = [value for value in best if value is not None]
    if not ends:
        return None

    result = max(ends)
    if haystack == needle:
        result += BONUS_EXACT
    return result


def rank(candidates, query):
    """
    Filter and order candidates by how well they match query.

    Candidates that do not match are dropped. The rest are ordered by
    descending score; equal scores keep their order from candidates.

    Returns:
        list[RankedCandidate]
    """
    ranked = []
    for candidate in candidates:
        value = score(candidate.sort_key, query)
        if value is not None:
            ranked.append(RankedCandidate(candidate, value))

    ranked.sort(key=lambda item: -item.score)
    return ranked
