from hypothesis import given
from hypothesis import strategies as st

from notesync.classify import (
    AUTH_MARKERS,
    CONFLICT_MARKERS,
    MESSAGES,
    PULL_RULES,
    PUSH_RULES,
    ErrorKind,
    classify_pull,
    classify_push,
)
from notesync.status import Divergence, RepositoryStatus

ALL_MARKERS = [marker for _, markers in PULL_RULES + PUSH_RULES for marker in markers]

# Strategy: digits, punctuation and whitespace only, so no marker can appear.
plain_text = st.text(alphabet="0123456789 .,:;!?-_/\n\t")


@given(text=plain_text)
def test_unmatched_text_passes_through_trimmed(text: str) -> None:
    """
    Property: Text with no marker is returned exactly as given, minus
    surrounding whitespace, so classification never hides information.
    """
    assert classify_pull(text) == text.strip()
    assert classify_push(text) == text.strip()


@given(
    prefix=st.text(),
    suffix=st.text(),
    conflict=st.sampled_from(CONFLICT_MARKERS),
    auth=st.sampled_from(AUTH_MARKERS),
)
def test_conflict_always_wins_on_pull(
    prefix: str, suffix: str, conflict: str, auth: str
) -> None:
    """
    Property: Whatever surrounds them, a conflict marker outranks an
    authentication marker in pull output.
    """
    text = f"{prefix}{auth}\n{conflict}{suffix}"
    assert classify_pull(text) == MESSAGES[ErrorKind.CONFLICT]


@given(text=st.text())
def test_classification_is_a_category_or_the_trimmed_input(text: str) -> None:
    """
    Property: The result is either one of the fixed messages or the input.
    """
    for result in (classify_pull(text), classify_push(text)):
        assert result in MESSAGES.values() or result == text.strip()
        if any(marker in text for marker in ALL_MARKERS):
            continue
        assert result == text.strip()


@given(
    upstream=st.one_of(
        st.none(),
        st.builds(
            Divergence,
            ahead=st.integers(min_value=0, max_value=10_000),
            behind=st.integers(min_value=0, max_value=10_000),
        ),
    )
)
def test_sentinel_matches_tracking_state(upstream: Divergence | None) -> None:
    """
    Property: Counts are -1 exactly when there is no upstream tracking.
    """
    status = RepositoryStatus(is_repository=True, upstream=upstream)

    assert (status.ahead_count >= 0) == status.has_upstream_tracking
    assert (status.behind_count >= 0) == status.has_upstream_tracking
    if not status.has_upstream_tracking:
        assert status.ahead_count == status.behind_count == -1
