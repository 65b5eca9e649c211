"""
Theme clustering of force responses.
"""

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from jtbd_forces.schemas import ResponseCluster
from jtbd_forces.services.forces.lexicon import THEME_PATTERNS, content_words, tokenize
from jtbd_forces.services.forces.normalizer import ResponseNormalizer
from jtbd_forces.domain.vocabulary import JTBDForce

logger = logging.getLogger(__name__)

OTHER_THEME = "other"
MIN_SHARED_WORDS = 2


class ResponseClusterer:
    """
    Groups the responses of one force into themes.

    Responses are first assigned to the lexicon theme with the most keyword
    hits; the rest are grouped when they share at least two content words.
    """

    def __init__(self, normalizer: Optional[ResponseNormalizer] = None):
        self.normalizer = normalizer or ResponseNormalizer()

    def _match_theme(self, text: str) -> Tuple[Optional[str], List[str]]:
        tokens = tokenize(text)
        best_theme, best_words = None, []
        for theme, patterns in THEME_PATTERNS.items():
            words = [t for t in tokens if any(p.fullmatch(t) for _, p in patterns)]
            if len(words) > len(best_words):
                best_theme, best_words = theme, words
        return best_theme, best_words

    def _group_unmatched(self, texts: List[str]) -> List[Tuple[str, List[str], List[str]]]:
        """Group texts sharing at least two content words."""
        groups = []
        used = set()

        for index, text in enumerate(texts):
            if index in used:
                continue
            words = set(content_words(tokenize(text)))
            members = [text]
            shared_all = None
            for other_index in range(index + 1, len(texts)):
                if other_index in used:
                    continue
                other_words = set(content_words(tokenize(texts[other_index])))
                shared = words & other_words
                if len(shared) >= MIN_SHARED_WORDS:
                    members.append(texts[other_index])
                    used.add(other_index)
                    shared_all = shared if shared_all is None else shared_all | shared

            if len(members) > 1:
                used.add(index)
                keywords = sorted(shared_all)
                groups.append((" ".join(keywords[:2]), members, keywords))

        leftovers = [text for i, text in enumerate(texts) if i not in used]
        if leftovers:
            groups.append((OTHER_THEME, leftovers, []))
        return groups

    def cluster_responses(self, responses: List[str], force: JTBDForce) -> List[ResponseCluster]:
        """
        Cluster response texts for a force.

        Args:
            responses: Response texts
            force: Force the responses were given for

        Returns:
            Clusters ordered by size, then strength
        """
        force = JTBDForce(force)
        themed: Dict[str, Tuple[List[str], List[str]]] = {}
        unmatched: List[str] = []

        for text in responses:
            theme, words = self._match_theme(text)
            if theme is None:
                unmatched.append(text)
                continue
            members, keywords = themed.setdefault(theme, ([], []))
            members.append(text)
            keywords.extend(w for w in words if w not in keywords)

        groups = [(theme, members, keywords) for theme, (members, keywords) in themed.items()]
        groups.extend(self._group_unmatched(unmatched))

        total = max(len(responses), 1)
        clusters = []
        for theme, members, keywords in groups:
            intensities = [self.normalizer.score_force_intensity(text, force) for text in members]
            strength = float(np.mean([i.score for i in intensities]))
            share = len(members) / total
            confidence = float(np.mean([i.confidence for i in intensities])) * (0.5 + 0.5 * share)
            clusters.append(
                ResponseCluster(
                    theme=theme,
                    responses=members,
                    keywords=keywords,
                    strength=round(strength, 2),
                    confidence=round(min(confidence, 1.0), 4),
                )
            )

        clusters.sort(key=lambda c: (-len(c.responses), -c.strength, c.theme))
        logger.debug(f"Clustered {len(responses)} {force.value} responses into {len(clusters)} themes")
        return clusters
