"""Curated source lists for AI obituary discovery.

Reputable publications and notable individuals whose AI skepticism claims
are worth tracking, plus the heuristics used to judge accounts that are not
on any list.

Organization:
    PUBLICATION_TIERS: news domains, tier 1 (mainstream) and tier 2 (tech/AI)
    NOTABLE_HANDLES: X/Twitter handles grouped by role (stored without '@')
    NOTABILITY: follower thresholds and bio keywords for unknown accounts
    AI_DOOM_KEYWORDS: search phrases for the discovery queries
    EXCLUSION_PATTERNS: spam and promotional markers
"""

import re

PUBLICATION_TIERS: dict[str, tuple[str, ...]] = {
    # === Tier 1: Gold standard ===
    # Major outlets with wide reach
    "tier1": (
        "nytimes.com",
        "wsj.com",
        "washingtonpost.com",
        "theguardian.com",
        "bbc.com",
        "bbc.co.uk",
        "reuters.com",
        "bloomberg.com",
        "ft.com",
        "economist.com",
        "forbes.com",
        "businessinsider.com",
        "cnbc.com",
        "theatlantic.com",
        "newyorker.com",
    ),
    # === Tier 2: High signal ===
    # Tech, research-adjacent and AI-specific publications
    "tier2": (
        "wired.com",
        "arstechnica.com",
        "techcrunch.com",
        "theverge.com",
        "technologyreview.com",
        "venturebeat.com",
        "zdnet.com",
        "engadget.com",
        "nature.com",
        "science.org",
        "scientificamerican.com",
        "spectrum.ieee.org",
        "theinformation.com",
        "semafor.com",
        "404media.co",
    ),
}

ALL_WHITELISTED_DOMAINS: tuple[str, ...] = PUBLICATION_TIERS["tier1"] + PUBLICATION_TIERS["tier2"]

NOTABLE_HANDLES: dict[str, tuple[str, ...]] = {
    # AI researchers known for skepticism, criticism or public AGI takes
    "ai_researchers": (
        "GaryMarcus",      # NYU professor emeritus, prominent AI critic
        "emilymbender",    # UW linguist, "Stochastic Parrots" co-author
        "mmitchell_ai",    # former Google AI ethics lead
        "ylecun",          # Meta chief AI scientist, AGI timeline takes
        "jackclarkSF",     # Anthropic co-founder, policy
        "drfeifei",        # Stanford HAI
        "geoffreyhinton",  # Turing laureate, risk warnings
    ),
    "tech_execs": (
        "elonmusk",
    ),
    # Investors and analysts
    "vcs": (
        "paulg",
        "sama",
        "naval",
        "balajis",
        "chamath",
        "benedictevans",
        "pmarca",
    ),
    "journalists": (
        "zoeschiffer",     # Platformer
    ),
    # Non-AI academics with frequent AI commentary
    "academics": (
        "stevepinker",
        "tylercowen",
    ),
}

ALL_NOTABLE_HANDLES: frozenset[str] = frozenset(
    handle for group in NOTABLE_HANDLES.values() for handle in group
)

# Thresholds for accounts that are not whitelisted
VERIFIED_MIN_FOLLOWERS = 5_000   # verified accounts, also the bio-match threshold
MIN_FOLLOWERS = 10_000           # anyone at or above this passes

BIO_KEYWORDS = re.compile(
    r"\b(AI|artificial intelligence|machine learning|ML|deep learning|NLP|researcher|"
    r"professor|PhD|founder|CEO|CTO|VP|director|engineer at|scientist at|journalist|"
    r"reporter|analyst|author)\b",
    re.IGNORECASE,
)

AI_DOOM_KEYWORDS: tuple[str, ...] = (
    # Direct doom claims
    '"AI will never"',
    '"AI cannot"',
    '"AI won\'t"',
    '"AI is overhyped"',
    '"AI bubble"',
    '"AI winter"',
    # Capability skepticism
    '"AGI is impossible"',
    '"AGI will never"',
    '"LLMs are just"',
    '"LLMs cannot"',
    '"GPT cannot"',
    '"ChatGPT cannot"',
    # Market skepticism
    '"AI stocks will crash"',
    '"AI investment bubble"',
    '"AI is overvalued"',
    # General skepticism
    '"AI hype"',
    '"AI skeptic"',
    '"AI doomer"',
    '"stochastic parrots"',
)

# Only the leading keywords go into a query to keep it short
QUERY_KEYWORD_LIMIT = 8

MIN_CONTENT_LENGTH = 50

EXCLUSION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(click here|subscribe|buy now|limited time)\b", re.IGNORECASE),
    re.compile(r"\b(sponsored|advertisement|paid partnership)\b", re.IGNORECASE),
)
