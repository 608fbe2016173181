"""Warm-Start Tags - verifies heuristic interest inference.

Tests:
    - Role tag always first
    - Keywords match whole words and prefixes (for keywords longer than 2 chars)
    - Email domain suffix adds an interest
    - Output is de-duplicated and capped
"""

from event_maker.core.domain_types import RoleHint
from event_maker.core.identity_records import ProfileHints
from event_maker.core.warm_start_tags import MAX_INTEREST_TAGS, infer_interest_tags


def test_minimal_hints_yield_role_tag():
    assert infer_interest_tags(ProfileHints()) == ["role:attendee"]


def test_keywords_and_domain():
    hints = ProfileHints(
        display_name="Ada Founder",
        tags=("AI", "investor"),
        email="ada@mit.edu",
    )
    assert infer_interest_tags(hints) == [
        "role:attendee",
        "venture_capital",
        "entrepreneurship",
        "artificial_intelligence",
        "academia",
    ]


def test_short_keywords_need_whole_word():
    # "vc" must not match "vcard", "ai" must not match "aide"
    hints = ProfileHints(tags=("vcard", "aide"))
    assert infer_interest_tags(hints) == ["role:attendee"]


def test_duplicates_collapse():
    hints = ProfileHints(tags=("investor", "vc"), role_hint=RoleHint.SPEAKER)
    assert infer_interest_tags(hints) == ["role:speaker", "venture_capital"]


def test_output_is_capped():
    hints = ProfileHints(
        tags=("founder", "engineer", "policy", "privacy", "research", "design"),
    )
    tags = infer_interest_tags(hints)
    assert len(tags) == MAX_INTEREST_TAGS
    assert tags[0] == "role:attendee"
