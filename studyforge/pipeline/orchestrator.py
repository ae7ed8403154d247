"""Pipeline orchestration for Studyforge.

Responsibilities:
- Define the stage order for study-content generation and narration flows.
- Enforce quota and serve cached content before any generation work.
- Map collaborator failures to stage-scoped, user-facing errors.

Key types:
- `StudyPipeline`: orchestration facade.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from ..audio.merger import AudioMerger
from ..config import StudyforgeConfig
from ..errors import (
    CollaboratorError,
    ErrorKind,
    PipelineStageError,
    RateLimitExceededError,
)
from ..io.storage import ArtifactStore, ContentStore, JsonFileContentStore
from ..llm.cache import ContentCache
from ..llm.generator import ContentGenerator, NarrationWriter
from ..llm.prompts import PromptLibrary
from ..llm.rate_limiter import RateLimiter, utc_now
from ..llm.retry import RetryPolicy
from ..models.content import (
    DIFFICULTIES,
    ContentKind,
    Narration,
    build_item_set,
)
from ..models.datatypes import (
    CacheEntry,
    GenerationOutcome,
    GenerationRequest,
    GenerationUnit,
    NarrationRequest,
    PipelineResult,
    SegmentationResult,
)
from ..provider_factory import ProviderFactory
from ..telemetry.logger import RunLogger, log_event
from ..text.budget import build_generation_units
from ..text.chunk_selection import select_representative_chunks
from ..text.chunking import Segmenter
from ..text.normalizer import (
    TextNormalizer,
    estimate_audio_duration,
    estimate_word_count,
    truncate_text,
)
from ..text.similarity import SimilarityDeduplicator
from ..text.slug import slugify
from ..tts.script_splitter import split_for_synthesis
from ..tts.synthesizer import SpeechSynthesizer
from .generation import GenerationOrchestrator
from .speech import synthesize_pieces
from .telemetry import PipelineTelemetryMixin

_MIN_SCRIPT_CHARS = 100

_HINTS_BY_KIND = {
    ErrorKind.TRANSIENT: "The provider is temporarily unavailable; rerun the command later.",
    ErrorKind.INPUT_INVALID: "Check the source document, model settings, and API key.",
    ErrorKind.QUOTA_EXCEEDED: "Check provider billing and quota, then rerun the command.",
    ErrorKind.CONTRACT_VIOLATION: "The provider returned malformed output; rerun the command.",
}


class StudyPipeline(PipelineTelemetryMixin):
    """Coordinate all stages for study-content generation and narration."""

    def __init__(
        self,
        config: StudyforgeConfig,
        *,
        content_store: ContentStore | None = None,
        artifact_store: ArtifactStore | None = None,
        generator_for: Callable[[ContentKind], ContentGenerator] | None = None,
        narration_writer: NarrationWriter | None = None,
        synthesizer: SpeechSynthesizer | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
    ) -> None:
        """Initialize collaborators, resilience policies, and telemetry hooks."""

        self._validate_config(config)
        self.config = config
        self._providers = ProviderFactory(config)
        self._generator_for = generator_for or self._providers.create_generator
        self._narration_writer = narration_writer
        self._synthesizer = synthesizer
        self._content_store = content_store or JsonFileContentStore(config.store_path)
        self._artifact_store = artifact_store or ArtifactStore(config.output_dir)
        self._retry_policy = retry_policy or config.retry_policy()
        self._clock = clock
        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback
        self._active_flow = ""

        self.normalizer = TextNormalizer()
        self.segmenter = Segmenter(self.normalizer)
        self.prompts = PromptLibrary()
        self.rate_limiter = RateLimiter(
            store=self._content_store,
            max_invocations=config.rate_limit_max,
            window=config.rate_limit_window,
            clock=clock,
        )
        self.cache = ContentCache(
            store=self._content_store,
            freshness_window=config.cache_freshness_window,
            clock=clock,
        )
        self.orchestrator = GenerationOrchestrator(
            retry_policy=self._retry_policy,
            deduplicator=SimilarityDeduplicator(config.similarity_threshold),
            prompts=self.prompts,
        )
        self.merger = AudioMerger()

    def segment(self, text: str) -> SegmentationResult:
        """Normalize and segment text with the configured bounds."""

        return self.segmenter.segment(text, self.config.segmentation_options())

    def generate(self, request: GenerationRequest) -> PipelineResult:
        """Produce a question set, flashcard set, or slide deck for one request."""

        self._active_flow = "generate"
        self._validate_generation_request(request)
        self._run_stage("rate-limit", lambda: self._enforce_rate_limit(request.user_id))

        if not request.skip_cache:
            cached = self._run_stage(
                "cache",
                lambda: self.cache.lookup(
                    request.user_id,
                    request.source_id,
                    request.kind,
                    request.cache_params(),
                ),
            )
            if cached is not None:
                return self._cached_result(cached)

        segmentation = self._run_stage("segment", lambda: self._segment_request(request.text))
        units = self._run_stage("plan", lambda: self._plan_units(segmentation, request.total))
        outcome = self._run_stage("generate", lambda: self._generate_items(request, units))

        content = build_item_set(request.kind, list(outcome.items), request.difficulty)
        entry = self._run_stage(
            "store",
            lambda: self.cache.store_content(
                request.user_id,
                request.source_id,
                request.kind,
                request.cache_params(),
                content,
            ),
        )
        return PipelineResult(
            content=content,
            cached=False,
            generated_at=entry.created_at,
            metadata={
                "chunk_count": str(segmentation.chunk_count),
                "unit_count": str(len(units)),
                "failed_units": str(len(outcome.failed_unit_indices)),
                "duplicates_removed": str(outcome.duplicates_removed),
                "shortfall": str(outcome.shortfall),
                "total_characters": str(segmentation.total_characters),
            },
        )

    def narrate(self, request: NarrationRequest) -> PipelineResult:
        """Produce a narrated audio summary for one request."""

        self._active_flow = "narrate"
        self._validate_difficulty(request.difficulty)
        self._run_stage("rate-limit", lambda: self._enforce_rate_limit(request.user_id))

        if not request.skip_cache:
            cached = self._run_stage(
                "cache",
                lambda: self.cache.lookup(
                    request.user_id,
                    request.source_id,
                    ContentKind.NARRATION,
                    request.cache_params(),
                ),
            )
            if cached is not None:
                return self._cached_result(cached)

        normalized = self._run_stage("normalize", lambda: self._normalize_source(request.text))
        script = self._run_stage(
            "script", lambda: self._write_script(normalized, request.difficulty)
        )
        pieces = split_for_synthesis(script, self.config.tts_max_chars)
        segments = self._run_stage("tts", lambda: self._synthesize(pieces))
        audio = self._run_stage(
            "merge", lambda: self.merger.concatenate(segments, self.config.audio_format)
        )
        reference = self._save_audio(request.source_id, audio)

        content = Narration(
            script=script,
            audio_reference=reference,
            duration_seconds=estimate_audio_duration(estimate_word_count(script)),
            voice=self.config.tts_voice,
            difficulty=request.difficulty,
        )
        entry = self._run_stage(
            "store",
            lambda: self.cache.store_content(
                request.user_id,
                request.source_id,
                ContentKind.NARRATION,
                request.cache_params(),
                content,
            ),
        )
        return PipelineResult(
            content=content,
            cached=False,
            generated_at=entry.created_at,
            metadata={
                "piece_count": str(len(pieces)),
                "audio_bytes": str(len(audio)),
                "word_count": str(estimate_word_count(script)),
            },
        )

    def _validate_config(self, config: StudyforgeConfig) -> None:
        """Validate top-level configuration and map failures to stage-aware error."""

        try:
            config.validate()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Update the config file or STUDYFORGE_* variables and rerun the command.",
            ) from exc

    def _validate_generation_request(self, request: GenerationRequest) -> None:
        if request.kind is ContentKind.NARRATION:
            raise PipelineStageError(
                stage="request",
                detail="Narration requests must use the `narrate` flow.",
            )
        if request.total < 1:
            raise PipelineStageError(
                stage="request",
                detail=f"Requested item count must be at least 1, got {request.total}.",
            )
        self._validate_difficulty(request.difficulty)

    @staticmethod
    def _validate_difficulty(difficulty: str) -> None:
        if difficulty not in DIFFICULTIES:
            supported = ", ".join(DIFFICULTIES)
            raise PipelineStageError(
                stage="request",
                detail=f"Unsupported difficulty `{difficulty}`.",
                hint=f"Use one of: {supported}.",
            )

    def _enforce_rate_limit(self, user_id: str) -> None:
        decision = self.rate_limiter.check(user_id)
        if not decision.allowed:
            raise RateLimitExceededError(
                detail=decision.error or "Rate limit exceeded.",
                remaining=decision.remaining,
                reset_at=decision.reset_at,
            )

    @staticmethod
    def _cached_result(entry: CacheEntry) -> PipelineResult:
        return PipelineResult(
            content=entry.content,
            cached=True,
            generated_at=entry.created_at,
            metadata={"cached": "true"},
        )

    def _segment_request(self, text: str) -> SegmentationResult:
        segmentation = self.segment(text)
        if segmentation.chunk_count == 0:
            raise PipelineStageError(
                stage="segment",
                detail="No usable text remains after normalization.",
                hint="Provide a text-based document; scanned PDFs are not supported.",
            )
        return segmentation

    def _plan_units(
        self, segmentation: SegmentationResult, total: int
    ) -> list[GenerationUnit]:
        """Use the capped first chunk for small requests, else fan out over selected chunks."""

        if total <= self.config.single_call_max_items or segmentation.chunk_count == 1:
            first = segmentation.chunks[0]
            text = truncate_text(first.text, self.config.single_call_max_chars).rstrip()
            chunk = replace(first, text=text, char_end=first.char_start + len(text))
            return [GenerationUnit(chunk=chunk, budget=total)]

        selected = select_representative_chunks(segmentation.chunks, self.config.max_chunks)
        return build_generation_units(selected, total)

    def _generate_items(
        self, request: GenerationRequest, units: list[GenerationUnit]
    ) -> GenerationOutcome:
        generator = self._generator_for(request.kind)
        try:
            outcome = asyncio.run(
                self.orchestrator.generate(
                    units,
                    generator,
                    request.total,
                    kind=request.kind,
                    difficulty=request.difficulty,
                )
            )
        except CollaboratorError as exc:
            raise self._collaborator_stage_error("generate", exc) from exc

        if not outcome.items:
            raise PipelineStageError(
                stage="generate",
                detail=f"No {request.kind.value} items could be generated from the document.",
                hint="Rerun the command; provider failures were logged per chunk.",
            )
        return outcome

    def _normalize_source(self, text: str) -> str:
        normalized = self.normalizer.normalize(text)
        if not normalized:
            raise PipelineStageError(
                stage="normalize",
                detail="No usable text remains after normalization.",
                hint="Provide a text-based document; scanned PDFs are not supported.",
            )
        return normalized

    def _write_script(self, normalized: str, difficulty: str) -> str:
        writer = self._narration_writer or self._providers.create_narration_writer()
        source_text = truncate_text(normalized, self.config.narration_source_max_chars)
        prompt = self.prompts.narration_system_prompt(difficulty)
        try:
            script = self._retry_policy.call(
                lambda: writer.write_script(
                    prompt=prompt,
                    source_text=source_text,
                    difficulty=difficulty,
                ),
                operation="narration-script",
            ).strip()
            if len(script) < _MIN_SCRIPT_CHARS:
                raise CollaboratorError(
                    f"Narration script is too short ({len(script)} characters).",
                    kind=ErrorKind.CONTRACT_VIOLATION,
                )
        except CollaboratorError as exc:
            raise self._collaborator_stage_error("script", exc) from exc
        return script

    def _synthesize(self, pieces: list[str]) -> list[bytes]:
        synthesizer = self._synthesizer or self._providers.create_tts_synthesizer()
        try:
            return asyncio.run(synthesize_pieces(pieces, synthesizer, self._retry_policy))
        except CollaboratorError as exc:
            raise self._collaborator_stage_error("tts", exc) from exc

    def _save_audio(self, source_id: str, audio: bytes) -> str:
        """Hand audio to the artifact store; storage failure leaves the reference empty."""

        timestamp = self._clock().strftime("%Y%m%dT%H%M%S")
        relative_path = (
            Path("narration") / f"{slugify(source_id)}-{timestamp}.{self.config.audio_format}"
        )
        try:
            return self._artifact_store.save_bytes(relative_path, audio)
        except OSError as exc:
            log_event("WARNING", "store", "audio_save_failed", error_type=type(exc).__name__)
            return ""

    @staticmethod
    def _collaborator_stage_error(stage: str, exc: CollaboratorError) -> PipelineStageError:
        return PipelineStageError(
            stage=stage,
            detail=str(exc),
            hint=_HINTS_BY_KIND.get(exc.kind),
        )
