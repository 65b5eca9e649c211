"""
Response normalizer for JTBD forces analysis.

Filters non-answers and converts each remaining response into a per-force
intensity on the 1-5 scale using the intensity lexicon.
"""

import logging
import re
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from jtbd_forces.schemas import (
    ForceIntensity,
    NormalizedResponse,
    QuestionForceMapping,
    SentimentResult,
    SurveyResponse,
)
from jtbd_forces.services.forces.lexicon import (
    ANCHOR_PATTERNS,
    INTENSITY_MODIFIERS,
    NEGATIVE_PATTERNS,
    NEGATION_FILLERS,
    NEGATORS,
    NON_ANSWER_TOKENS,
    POSITIVE_PATTERNS,
    matches_token,
    tokenize,
)
from jtbd_forces.domain.vocabulary import (
    FORCE_POLARITY,
    JTBDForce,
    MAX_FORCE_STRENGTH,
    MIN_FORCE_STRENGTH,
    NEUTRAL_FORCE_STRENGTH,
)

logger = logging.getLogger(__name__)

_LIKERT_RE = re.compile(r"^([1-5])(?:\.0+)?$")

EXTRA_ANCHOR_BONUS = 0.25
MAX_EXTRA_ANCHOR_BONUS = 0.5
SENTIMENT_SHIFT = 1.5
SENTIMENT_LABEL_THRESHOLD = 0.3


def is_non_answer(value: Optional[str]) -> bool:
    """True for empty values and known non-answer tokens (exact, case-insensitive)."""
    if value is None:
        return True
    stripped = value.strip()
    return not stripped or stripped.lower() in NON_ANSWER_TOKENS


def _bound(score: float) -> float:
    return max(MIN_FORCE_STRENGTH, min(MAX_FORCE_STRENGTH, score))


class ResponseNormalizer:
    """
    Normalizer that scores survey responses for the forces their questions map to.
    """

    def analyze_sentiment(self, text: str) -> SentimentResult:
        """
        Lexicon-based sentiment of a response.

        Args:
            text: Response text

        Returns:
            SentimentResult with score in [-1, 1], magnitude and label
        """
        positive = negative = 0
        for token in tokenize(text or ""):
            if matches_token(POSITIVE_PATTERNS, token):
                positive += 1
            elif matches_token(NEGATIVE_PATTERNS, token):
                negative += 1

        magnitude = positive + negative
        score = (positive - negative) / magnitude if magnitude else 0.0

        if score > SENTIMENT_LABEL_THRESHOLD:
            label = "positive"
        elif score < -SENTIMENT_LABEL_THRESHOLD:
            label = "negative"
        else:
            label = "neutral"

        return SentimentResult(score=round(score, 4), magnitude=float(magnitude), label=label)

    def score_force_intensity(self, text: str, force: JTBDForce) -> ForceIntensity:
        """
        Score how strongly a response expresses a force.

        Args:
            text: Response text or Likert code
            force: Force to score the response against

        Returns:
            ForceIntensity with score in [1, 5], confidence and matched keywords
        """
        force = JTBDForce(force)
        stripped = (text or "").strip()

        likert = _LIKERT_RE.match(stripped)
        if likert:
            return ForceIntensity(score=float(likert.group(1)), confidence=0.9, keywords=[])

        tokens = tokenize(stripped)
        keywords: List[str] = []

        # Anchor words, negated when preceded by a negator (modifiers and fillers skipped)
        anchor_scores: Dict[str, float] = {}
        for index, token in enumerate(tokens):
            for pattern, compiled, value in ANCHOR_PATTERNS[force]:
                if not compiled.fullmatch(token):
                    continue
                if self._is_negated(tokens, index):
                    value = MAX_FORCE_STRENGTH + MIN_FORCE_STRENGTH - value
                anchor_scores[pattern] = max(anchor_scores.get(pattern, value), value)
                keywords.append(token)
                break

        modifier_shift, modifier_words = self._strongest_modifier(tokens)

        if anchor_scores:
            score = max(anchor_scores.values())
            score += min(EXTRA_ANCHOR_BONUS * (len(anchor_scores) - 1), MAX_EXTRA_ANCHOR_BONUS)
            if modifier_words:
                score += modifier_shift
                keywords = modifier_words + keywords
        else:
            sentiment = self.analyze_sentiment(stripped)
            score = NEUTRAL_FORCE_STRENGTH + SENTIMENT_SHIFT * FORCE_POLARITY[force] * sentiment.score

        hits = len(anchor_scores) + (1 if anchor_scores and modifier_words else 0)
        confidence = min(0.95, 0.3 + 0.15 * hits)

        return ForceIntensity(
            score=round(_bound(score), 4),
            confidence=round(confidence, 4),
            keywords=keywords,
        )

    def _is_negated(self, tokens: List[str], index: int) -> bool:
        position = index - 1
        while position >= 0 and (
            tokens[position] in INTENSITY_MODIFIERS or tokens[position] in NEGATION_FILLERS
        ):
            position -= 1
        return position >= 0 and tokens[position] in NEGATORS

    def _strongest_modifier(self, tokens: List[str]):
        found = []
        for index, token in enumerate(tokens):
            bigram = " ".join(tokens[index:index + 2])
            if bigram in INTENSITY_MODIFIERS:
                found.append((INTENSITY_MODIFIERS[bigram], bigram))
            elif token in INTENSITY_MODIFIERS:
                found.append((INTENSITY_MODIFIERS[token], token))
        if not found:
            return 0.0, []
        shift, word = max(found, key=lambda item: (abs(item[0]), item[0]))
        return shift, [word]

    def normalize(
        self,
        responses: Sequence[SurveyResponse],
        mappings: Sequence[QuestionForceMapping],
    ) -> List[NormalizedResponse]:
        """
        Filter non-answers and score every response for each mapped force.

        Args:
            responses: Survey responses in request order
            mappings: Question-to-force mappings

        Returns:
            One NormalizedResponse per (valid response, mapping) pair
        """
        by_question: Dict[str, List[QuestionForceMapping]] = defaultdict(list)
        for mapping in mappings:
            by_question[mapping.question_id].append(mapping)

        normalized: List[NormalizedResponse] = []
        skipped_non_answers = 0
        unmapped = 0

        for index, response in enumerate(responses):
            if is_non_answer(response.value):
                skipped_non_answers += 1
                continue
            question_mappings = by_question.get(response.question_id)
            if not question_mappings:
                unmapped += 1
                continue

            for mapping in question_mappings:
                intensity = self.score_force_intensity(response.value, mapping.force)
                normalized.append(
                    NormalizedResponse(
                        response=response,
                        response_index=index,
                        force=mapping.force,
                        weight=mapping.weight,
                        mapping_confidence=mapping.confidence,
                        source=mapping.source,
                        intensity=intensity.score,
                        intensity_confidence=intensity.confidence,
                        keywords=intensity.keywords,
                    )
                )

        if skipped_non_answers or unmapped:
            logger.info(
                f"Normalized {len(normalized)} force contributions; skipped "
                f"{skipped_non_answers} non-answers and {unmapped} unmapped responses"
            )
        return normalized
