"""Prompt template library for generation and narration stages.

Responsibilities:
- Centralize prompt construction per content kind and difficulty.
- Keep prompts deterministic for a given kind, budget, and difficulty.
- Provide per-kind response token ceilings for chat-completions calls.
"""

from __future__ import annotations

from ..models.content import ContentKind

_DIFFICULTY_GUIDELINES = {
    "basic": "Straightforward recall of key facts and simple definitions.",
    "intermediate": "Application of concepts and relationships between ideas.",
    "advanced": "Complex analysis, exceptions, edge cases, and comparisons.",
}


class PromptLibrary:
    """Build prompt strings for supported generation tasks."""

    def difficulty_guideline(self, difficulty: str) -> str:
        """Return the guideline sentence for a difficulty level."""

        return _DIFFICULTY_GUIDELINES.get(difficulty, _DIFFICULTY_GUIDELINES["intermediate"])

    def system_prompt(self, kind: ContentKind, budget: int, difficulty: str) -> str:
        """Return the system prompt for one item-set generation call."""

        guideline = self.difficulty_guideline(difficulty)
        if kind is ContentKind.QUIZ:
            return (
                "You are an expert tutor writing multiple-choice exam questions.\n\n"
                f"Generate exactly {budget} questions from the provided text.\n"
                f"Difficulty ({difficulty}): {guideline}\n\n"
                "Each question has exactly 4 options and one correct answer.\n"
                "Return a JSON array with this exact structure:\n"
                "[\n"
                '  {"question": "...", "options": ["...", "...", "...", "..."], '
                f'"correctAnswer": 0, "explanation": "...", "difficulty": "{difficulty}"}}\n'
                "]\n\n"
                "Return ONLY valid JSON, no additional text or markdown."
            )
        if kind is ContentKind.FLASHCARDS:
            return (
                "You are an expert tutor creating study flashcards.\n\n"
                f"Generate exactly {budget} flashcards from the provided text.\n"
                f"Difficulty ({difficulty}): {guideline}\n\n"
                "Mix question-and-answer, term-and-definition, and case-and-holding cards.\n"
                "Front side: concise question or term. Back side: 2-4 sentence answer.\n"
                "Return a JSON array with this exact structure:\n"
                "[\n"
                '  {"front": "...", "back": "...", "type": "question|term|case", '
                f'"difficulty": "{difficulty}"}}\n'
                "]\n\n"
                "Return ONLY valid JSON, no additional text or markdown."
            )
        if kind is ContentKind.SLIDES:
            return (
                "You are an expert lecturer building a presentation deck.\n\n"
                f"Create exactly {budget} slides summarizing the provided text.\n"
                f"Difficulty ({difficulty}): {guideline}\n\n"
                "Each slide has a short title and 3-5 concise bullet points.\n"
                "Return a JSON array of slides:\n"
                "[\n"
                '  {"title": "...", "bullets": ["...", "..."], "footer": "..."}\n'
                "]\n\n"
                "Return ONLY valid JSON, no additional text or markdown."
            )
        raise ValueError(f"Content kind `{kind.value}` has no item-set prompt.")

    def user_prompt(self, kind: ContentKind, budget: int, source_text: str) -> str:
        """Return the user prompt carrying the source text."""

        noun = {
            ContentKind.QUIZ: "questions",
            ContentKind.FLASHCARDS: "flashcards",
            ContentKind.SLIDES: "slides",
        }.get(kind, "items")
        return f"Generate {budget} {noun} based on this text:\n\n{source_text}"

    def max_tokens(self, kind: ContentKind, budget: int) -> int:
        """Return the response token ceiling for one generation call."""

        if kind is ContentKind.QUIZ:
            return min(4000, max(1, budget) * 400)
        if kind is ContentKind.FLASHCARDS:
            return min(4000, max(1, budget) * 150)
        if kind is ContentKind.NARRATION:
            return 2000
        return 4000

    def narration_system_prompt(self, difficulty: str) -> str:
        """Return the system prompt for single-narrator audio summaries."""

        return (
            "You are a professor creating an engaging audio summary for students.\n\n"
            f"Create a {difficulty}-level podcast script (single narrator) summarizing "
            "the provided material.\n"
            "Style: conversational but informative.\n"
            "Length: 5-8 minutes when spoken aloud (approximately 800-1200 words).\n"
            "Structure: a short introduction, the key concepts, and a brief recap.\n"
            "Write plain spoken prose only, with no headings, stage directions, "
            "or markdown."
        )

    def narration_user_prompt(self, source_text: str) -> str:
        """Return the user prompt for narration script writing."""

        return f"Create an audio summary script for this material:\n\n{source_text}"
