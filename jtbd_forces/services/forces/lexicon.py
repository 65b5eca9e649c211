"""
Keyword dictionaries for JTBD forces analysis.

All heuristic text scoring in the package reads from the tables in this
module, so changing a keyword list only requires bumping LEXICON_VERSION.

Pattern conventions:
- FORCE_QUESTION_KEYWORDS entries are regex fragments searched in the
  lower-cased question text, anchored at a word start.
- INTENSITY_ANCHORS, SENTIMENT_* and THEME_KEYWORDS entries are regexes
  that must match a whole lower-cased token.
"""

import re
from typing import Dict, List, Pattern, Tuple

from jtbd_forces.domain.vocabulary import JTBDForce, require_all_forces

LEXICON_VERSION = "2024.2"


# Question text -> force classification
FORCE_QUESTION_KEYWORDS: Dict[JTBDForce, List[str]] = {
    JTBDForce.PAIN_OF_OLD: [
        "frustrat",
        "problem",
        "limitation",
        "waste",
        "bother",
        "challeng",
        "difficult",
        "pain",
        "annoy",
        "struggl",
        "slow",
        "inefficien",
        "manual",
        "error",
        "issue",
        "dislike",
    ],
    JTBDForce.PULL_OF_NEW: [
        "benefit",
        "feature",
        r"need\b",
        r"needs\b",
        "looking for",
        "ideal",
        "improve",
        "better",
        r"want",
        "wish",
        "valuable",
        "attract",
        "excit",
        "opportunit",
        "automat",
        "faster",
    ],
    JTBDForce.ANCHORS_TO_OLD: [
        "investment",
        "invest",
        "migrat",
        "training cost",
        "switching",
        "contract",
        "current tool",
        "current solution",
        "current system",
        "familiar",
        "habit",
        "integrat",
        "budget",
        r"cost\b",
        "keep using",
        "stay with",
        "prevent",
    ],
    JTBDForce.ANXIETY_OF_NEW: [
        r"worr",
        r"risk",
        "concern",
        "confident",
        "wrong",
        "afraid",
        "fear",
        "uncertain",
        "trust",
        "security",
        "privacy",
        "hesitat",
        "nervous",
        "hold you back",
        "downtime",
    ],
    JTBDForce.DEMOGRAPHIC: [
        r"age\b",
        r"role\b",
        "industry",
        "company size",
        "department",
        "experience",
        "job title",
        "team size",
        "how often",
        "how long",
        "location",
        r"years\b",
        "employees",
        "frequency",
    ],
}

# Intensity anchors: token regex -> base score on the 1-5 scale
INTENSITY_ANCHORS: Dict[JTBDForce, Dict[str, float]] = {
    JTBDForce.PAIN_OF_OLD: {
        r"annoy\w*": 3.0,
        r"inconvenien\w*": 2.0,
        r"bother\w*": 2.5,
        r"frustrat\w*": 3.5,
        r"irritat\w*": 3.0,
        r"slow\w*": 3.0,
        r"unreliab\w*": 3.5,
        r"crash\w*": 4.0,
        r"broken": 4.0,
        r"bugs?|buggy": 3.0,
        r"errors?": 3.0,
        r"tedious": 3.0,
        r"manual\w*": 2.5,
        r"wast\w*": 3.5,
        r"difficult\w*": 3.0,
        r"painful\w*": 4.0,
        r"terribl\w*": 4.5,
        r"awful\w*": 4.5,
        r"horribl\w*": 4.5,
        r"hate[sd]?|hating": 4.5,
        r"angry|anger\w*": 4.0,
        r"quit|quits|quitting": 4.5,
        r"unbearabl\w*": 5.0,
        r"nightmare\w*": 4.5,
        r"problems?": 3.0,
        r"issues?": 2.5,
        r"limitations?|limited": 3.0,
        r"clunky": 3.0,
        r"outdated": 3.0,
        r"expensive": 3.0,
    },
    JTBDForce.PULL_OF_NEW: {
        r"need\w*": 3.5,
        r"want\w*": 3.0,
        r"wish\w*": 3.0,
        r"lov\w*": 4.5,
        r"excit\w*": 4.0,
        r"better": 3.0,
        r"faster": 3.0,
        r"easier": 3.0,
        r"improv\w*": 3.0,
        r"features?": 3.0,
        r"benefit\w*": 3.0,
        r"automat\w*": 3.0,
        r"save[sd]?|saving\w*": 3.0,
        r"must": 4.0,
        r"essential": 4.5,
        r"crucial": 4.5,
        r"ideal\w*": 3.5,
        r"interest\w*": 3.0,
        r"requir\w*": 3.5,
    },
    JTBDForce.ANCHORS_TO_OLD: {
        r"invest\w*": 4.0,
        r"already": 2.5,
        r"contracts?|contractual\w*": 3.5,
        r"train\w*": 3.0,
        r"integrat\w*": 3.0,
        r"habits?": 3.0,
        r"familiar\w*": 3.0,
        r"comfortable": 2.5,
        r"legacy": 3.0,
        r"sunk": 4.0,
        r"customi[sz]\w*": 3.0,
        r"depend\w*": 3.0,
        r"workflows?": 2.5,
        r"locked": 4.5,
        r"switching": 3.5,
        r"migrat\w*": 3.5,
        r"costs?|costly": 3.0,
    },
    JTBDForce.ANXIETY_OF_NEW: {
        r"worr\w*": 3.5,
        r"risk\w*": 3.5,
        r"concern\w*": 3.0,
        r"afraid": 4.0,
        r"fear\w*": 4.0,
        r"scared": 4.0,
        r"nervous\w*": 3.5,
        r"uncertain\w*": 3.0,
        r"unsure": 3.0,
        r"doubt\w*": 3.0,
        r"hesita\w*": 3.0,
        r"anxi\w*": 4.0,
        r"unproven": 3.5,
        r"lose|losing|loss": 3.5,
        r"downtime": 3.5,
        r"disrupt\w*": 3.5,
        r"secur\w*": 3.0,
        r"privacy": 3.0,
        r"terrified": 5.0,
        r"panic\w*": 4.5,
    },
    JTBDForce.DEMOGRAPHIC: {
        r"daily|constantly|always": 4.0,
        r"weekly": 3.0,
        r"monthly": 2.0,
        r"rarely|occasionally": 1.5,
    },
}

# Intensity adverbs: token or two-token phrase -> shift applied to the base score
INTENSITY_MODIFIERS: Dict[str, float] = {
    "extremely": 1.0,
    "absolutely": 1.0,
    "incredibly": 1.0,
    "totally": 1.0,
    "completely": 1.0,
    "very": 0.75,
    "highly": 0.75,
    "really": 0.5,
    "so": 0.5,
    "quite": 0.25,
    "fairly": 0.25,
    "somewhat": -0.5,
    "a bit": -0.5,
    "a little": -0.5,
    "slightly": -1.0,
    "minor": -1.0,
    "barely": -1.0,
}

NEGATORS = frozenset(
    [
        "not",
        "never",
        "no",
        "isn't",
        "aren't",
        "don't",
        "doesn't",
        "didn't",
        "wasn't",
        "hardly",
        "without",
    ]
)

# Words allowed between a negator and the anchor it negates ("not at all worried")
NEGATION_FILLERS = frozenset(["at", "all", "that", "too", "overly", "particularly"])

SENTIMENT_POSITIVE: List[str] = [
    r"lov\w*",
    r"great\w*",
    r"excellent",
    r"good",
    r"improv\w*",
    r"better",
    r"save[sd]?|saving\w*",
    r"eas(y|ier|ily)",
    r"fast",
    r"efficient\w*",
    r"happy",
    r"helpful",
    r"benefit\w*",
    r"exactly",
    r"solv\w*",
    r"perfect\w*",
    r"amazing",
    r"enjoy\w*",
    r"excit\w*",
    r"reliable",
]

SENTIMENT_NEGATIVE: List[str] = [
    r"frustrat\w*",
    r"unreliab\w*",
    r"hate[sd]?|hating",
    r"problems?",
    r"slow\w*",
    r"terribl\w*",
    r"awful",
    r"bad",
    r"crash\w*",
    r"difficult\w*",
    r"harder",
    r"annoy\w*",
    r"broken",
    r"worr\w*",
    r"angry",
    r"pain\w*",
    r"wast\w*",
    r"errors?",
    r"bugs?|buggy",
    r"fail\w*",
    r"expensive",
    r"complicated",
    r"confus\w*",
    r"horribl\w*",
]

# Exact, case-insensitive values treated as "no answer"
NON_ANSWER_TOKENS = frozenset(
    [
        "n/a",
        "na",
        "none",
        "-",
        "--",
        "null",
        "nil",
        "no answer",
        "no comment",
        "skip",
        "skipped",
        ".",
    ]
)

STOPWORDS = frozenset(
    [
        "a", "an", "the", "and", "or", "but", "if", "of", "to", "in", "on",
        "at", "for", "with", "about", "as", "by", "from", "is", "are", "was",
        "were", "be", "been", "do", "does", "did", "have", "has", "had", "i",
        "you", "your", "we", "our", "us", "they", "it", "its", "this", "that",
        "these", "those", "what", "which", "who", "how", "when", "where", "why",
        "any", "most", "more", "some", "my", "me", "would", "could", "should",
        "will", "can", "there", "their", "so", "too", "very", "than", "other",
        "all", "just", "much", "many", "into", "up",
    ]
)

# Clustering themes: theme -> token regexes
THEME_KEYWORDS: Dict[str, List[str]] = {
    "performance": [r"slow\w*", r"performance", r"speed\w*", r"load\w*", r"forever", r"lag\w*", r"crash\w*", r"faster"],
    "reliability": [r"reliab\w*", r"unreliab\w*", r"downtime", r"outages?", r"stab\w*", r"unstable", r"bugs?|buggy", r"errors?"],
    "cost": [r"cost\w*", r"price\w*", r"pricing", r"expensive", r"budget\w*", r"invest\w*"],
    "usability": [r"eas(y|ier|ily)", r"confus\w*", r"complicated", r"clunky", r"intuitive", r"usab\w*", r"interface"],
    "reporting": [r"report\w*", r"analytics?", r"dashboards?", r"insights?", r"features?", r"metrics?"],
    "security": [r"secur\w*", r"privacy", r"complian\w*", r"breach\w*"],
    "integration": [r"integrat\w*", r"api", r"connect\w*", r"sync\w*", r"workflows?"],
    "support": [r"support", r"help\w*", r"train\w*", r"onboard\w*", r"documentation"],
    "migration": [r"migrat\w*", r"switch\w*", r"transition\w*", r"data"],
}


def _compile_tokens(patterns: List[str]) -> List[Tuple[str, Pattern]]:
    return [(p, re.compile(p)) for p in patterns]


require_all_forces(FORCE_QUESTION_KEYWORDS, "FORCE_QUESTION_KEYWORDS")
require_all_forces(INTENSITY_ANCHORS, "INTENSITY_ANCHORS")

QUESTION_PATTERNS: Dict[JTBDForce, List[Tuple[str, Pattern]]] = {
    force: [(p, re.compile(r"\b" + p)) for p in patterns]
    for force, patterns in FORCE_QUESTION_KEYWORDS.items()
}

ANCHOR_PATTERNS: Dict[JTBDForce, List[Tuple[str, Pattern, float]]] = {
    force: [(p, re.compile(p), score) for p, score in anchors.items()]
    for force, anchors in INTENSITY_ANCHORS.items()
}

POSITIVE_PATTERNS = _compile_tokens(SENTIMENT_POSITIVE)
NEGATIVE_PATTERNS = _compile_tokens(SENTIMENT_NEGATIVE)
THEME_PATTERNS: Dict[str, List[Tuple[str, Pattern]]] = {
    theme: _compile_tokens(patterns) for theme, patterns in THEME_KEYWORDS.items()
}

_TOKEN_RE = re.compile(r"[a-z0-9$']+")


def tokenize(text: str) -> List[str]:
    """Lower-case word tokens of a text (apostrophes kept for negations)."""
    return _TOKEN_RE.findall(text.lower())


def content_words(tokens: List[str]) -> List[str]:
    return [t for t in tokens if t not in STOPWORDS]


def matches_token(patterns: List[Tuple[str, Pattern]], token: str) -> bool:
    return any(compiled.fullmatch(token) for _, compiled in patterns)
