"""Warm-Start Tags - heuristic interest tags for a freshly created identity.

Invariants:
    - Pure and deterministic: same hints produce the same tags in the same order
    - Output is de-duplicated and capped at MAX_INTEREST_TAGS
    - Always contains at least the role tag, so enrichment has something to write
"""

from event_maker.core.identity_records import ProfileHints

MAX_INTEREST_TAGS = 5

# keyword (lowercase substring) -> interest tag
_KEYWORD_INTERESTS: tuple[tuple[str, str], ...] = (
    ("invest", "venture_capital"),
    ("vc", "venture_capital"),
    ("founder", "entrepreneurship"),
    ("ceo", "leadership"),
    ("builder", "building"),
    ("engineer", "engineering"),
    ("developer", "engineering"),
    ("policy", "policy"),
    ("govern", "governance"),
    ("civic", "civic_tech"),
    ("privacy", "privacy"),
    ("identity", "digital_identity"),
    ("ai", "artificial_intelligence"),
    ("research", "research"),
    ("design", "design"),
    ("urban", "urban_planning"),
    ("speaker", "thought_leadership"),
)

# email domain suffix -> interest tag
_DOMAIN_INTERESTS: tuple[tuple[str, str], ...] = (
    (".edu", "academia"),
    (".gov", "public_sector"),
    (".org", "nonprofit"),
)


def infer_interest_tags(hints: ProfileHints) -> list[str]:
    """Derive interest tags from the caller's tags, name and email domain."""
    found: list[str] = [f"role:{hints.role_hint.value}"]
    words = _tokens(hints)
    for keyword, interest in _KEYWORD_INTERESTS:
        if keyword in words or any(w.startswith(keyword) for w in words if len(keyword) > 2):
            found.append(interest)
    domain = (hints.email or "").rpartition("@")[2].lower()
    for suffix, interest in _DOMAIN_INTERESTS:
        if domain.endswith(suffix):
            found.append(interest)
    return list(dict.fromkeys(found))[:MAX_INTEREST_TAGS]


def _tokens(hints: ProfileHints) -> set[str]:
    text = " ".join([*hints.tags, hints.display_name or ""]).lower()
    for sep in ",;/-_()":
        text = text.replace(sep, " ")
    return {w for w in text.split() if w}
