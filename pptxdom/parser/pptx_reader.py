"""High-level PPTX decoding.

``PPTXReader`` drives one decode: open the package, read the presentation
part, then every slide, master, theme and media part in ascending part
number, and assemble a ``Presentation``. Only an unreadable package or a
missing/broken presentation part fails the decode; every other problem is
reported as a warning on the result.
"""

import asyncio
import logging
import posixpath
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Optional

from pptxdom.cache.image_cache import ImageCache
from pptxdom.cache.theme_cache import ThemeCache
from pptxdom.config import Settings, get_settings
from pptxdom.dom.schema import (
    ImportSettings,
    MasterSlide,
    MediaFile,
    ParseProgress,
    ParseResult,
    ParseStage,
    Presentation,
    Size,
    Slide,
    Theme,
)
from pptxdom.errors import (
    InvalidPartError,
    MalformedXMLError,
    PackageError,
    PPTXDomError,
    PresentationPartError,
)
from pptxdom.mapper.element_mapper import MappingContext
from pptxdom.mapper.theme_applier import ResolvedTheme, ThemeApplier
from pptxdom.parser.media import media_type_for
from pptxdom.parser.package import (
    MEDIA_DIR,
    PRESENTATION_PART,
    SLIDE_MASTERS_DIR,
    SLIDES_DIR,
    THEMES_DIR,
    PPTXPackage,
    part_number,
)
from pptxdom.parser.presentation_parser import PresentationInfo, PresentationParser
from pptxdom.parser.relationships import load_relationships
from pptxdom.parser.slide_parser import (
    MasterParser,
    PartIndex,
    SlideParser,
)
from pptxdom.parser.theme_parser import ThemeParser, default_theme
from pptxdom.parser.xml_tree import decode_xml


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ParseProgress], None]

# Progress milestones, in percent
PROGRESS_LOADING = 10.0
PROGRESS_PRESENTATION = 20.0
PROGRESS_SLIDES_END = 60.0
PROGRESS_MASTERS = 65.0
PROGRESS_THEMES = 75.0
PROGRESS_MEDIA = 85.0
PROGRESS_DONE = 100.0


class CancellationToken:
    """Cooperative cancellation flag, checked between parts."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class _ProgressReporter:
    """Forwards progress events, keeping the percentage non-decreasing."""

    def __init__(self, callback: Optional[ProgressCallback]):
        self.callback = callback
        self.progress = 0.0
        self._lock = threading.Lock()

    def emit(
        self,
        stage: ParseStage,
        progress: float,
        message: str,
        current_slide: Optional[int] = None,
        total_slides: Optional[int] = None,
    ) -> None:
        with self._lock:
            self.progress = max(self.progress, min(progress, PROGRESS_DONE))
            event = ParseProgress(
                stage=stage,
                progress=self.progress,
                message=message,
                current_slide=current_slide,
                total_slides=total_slides,
            )
        logger.debug(f"[{stage.value} {event.progress:.0f}%] {message}")
        if self.callback is None:
            return
        try:
            self.callback(event)
        except Exception:
            logger.exception("Progress callback failed")


@dataclass
class _SlideOutcome:
    """Result of one slide part, merged by slide number."""

    number: int
    part_name: str
    slide: Optional[Slide] = None
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    failed: bool = False
    skipped: bool = False


@dataclass
class _DecodeState:
    """Everything one decode owns; nothing here is shared across decodes."""

    package: PPTXPackage
    info: PresentationInfo
    import_settings: ImportSettings
    scale: float
    part_index: PartIndex
    theme_cache: ThemeCache
    image_cache: ImageCache = field(default_factory=ImageCache)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    _reported: set[str] = field(default_factory=set)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def warn_once(self, part_name: str, message: str) -> None:
        """Record one warning per part, however many stages trip over it."""
        with self._lock:
            if part_name in self._reported:
                return
            self._reported.add(part_name)
            self.warnings.append(message)
        logger.warning(message)


class PPTXReader:
    """Decodes PPTX packages into ``Presentation`` trees."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize the reader.

        Args:
            settings: Decoder settings; defaults to ``get_settings()``.
        """
        self.settings = settings or get_settings()
        self.presentation_parser = PresentationParser()
        self.theme_parser = ThemeParser()
        self.master_parser = MasterParser()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read(
        self,
        data: bytes,
        file_name: str = "presentation.pptx",
        import_settings: Optional[ImportSettings] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ParseResult:
        """Decode a PPTX package.

        Args:
            data: Raw package bytes.
            file_name: Name used in log messages and diagnostics.
            import_settings: Element kinds to import and the target canvas.
            on_progress: Called with a ``ParseProgress`` after each phase.
            cancel_token: Checked before every part.

        Returns:
            ParseResult. Decode problems never raise; a fatal one yields
            ``success=False`` with the reason in ``errors``.
        """
        started = time.perf_counter()
        import_settings = import_settings or ImportSettings()
        reporter = _ProgressReporter(on_progress)

        def elapsed_ms() -> float:
            return (time.perf_counter() - started) * 1000

        reporter.emit(ParseStage.INITIALIZING, 0.0, f"Starting decode of {file_name}")
        logger.info(f"Decoding {file_name} ({len(data)} bytes)")

        try:
            package = PPTXPackage.from_bytes(data, self.settings.max_package_size_bytes)
        except PackageError as exc:
            return self._fail(reporter, file_name, str(exc), elapsed_ms())

        with package:
            reporter.emit(ParseStage.LOADING, PROGRESS_LOADING, "Package opened")
            try:
                info = self._read_presentation(package)
            except PresentationPartError as exc:
                return self._fail(reporter, file_name, str(exc), elapsed_ms())

            target = import_settings.target_slide_size.dimensions()
            natural = info.slide_size
            scale = min(target.width / natural.width, target.height / natural.height)
            state = _DecodeState(
                package=package,
                info=info,
                import_settings=import_settings,
                scale=scale,
                part_index=PartIndex(package),
                theme_cache=ThemeCache(max_size=self.settings.theme_cache_size),
            )
            state.warnings.extend(info.warnings)
            reporter.emit(
                ParseStage.PARSING,
                PROGRESS_PRESENTATION,
                f"Presentation part read, {info.declared_slide_count} slides declared",
            )

            slides, cancelled = self._read_slides(state, reporter, cancel_token)

            masters: list[MasterSlide] = []
            themes: list[Theme] = []
            media: list[MediaFile] = []
            if not cancelled:
                reporter.emit(ParseStage.PARSING, PROGRESS_MASTERS, "Parsing slide masters")
                masters, cancelled = self._read_masters(state, cancel_token)
            if not cancelled:
                reporter.emit(ParseStage.PARSING, PROGRESS_THEMES, "Parsing themes")
                themes, cancelled = self._read_themes(state, cancel_token)
            if not cancelled:
                reporter.emit(ParseStage.PARSING, PROGRESS_MEDIA, "Collecting media")
                media, cancelled = self._read_media(state, cancel_token)

            if cancelled:
                state.warnings.append(
                    f"Decode cancelled; returning {len(slides)} of "
                    f"{len(package.numbered_parts(SLIDES_DIR, 'slide'))} slides"
                )

            presentation = Presentation(
                slides=slides,
                masters=masters,
                themes=themes,
                media=media,
                slide_size=natural,
                canvas_size=Size(width=natural.width * scale, height=natural.height * scale),
                scale=scale,
                slide_count=len(slides),
                declared_slide_count=info.declared_slide_count,
            )

        logger.info(
            f"Decoded {file_name}: {len(slides)} slides, {len(state.warnings)} warnings "
            f"in {elapsed_ms():.1f}ms"
            + (" (cancelled)" if cancelled else "")
        )
        logger.debug(f"Theme cache: {state.theme_cache.stats()}, images: {state.image_cache.stats()}")
        reporter.emit(
            ParseStage.COMPLETED,
            PROGRESS_DONE,
            "Decode cancelled" if cancelled else f"Decoded {len(slides)} slides",
        )
        return ParseResult(
            success=True,
            data=presentation,
            errors=state.errors,
            warnings=state.warnings,
            processing_time_ms=elapsed_ms(),
            cancelled=cancelled,
        )

    async def read_async(self, data: bytes, **kwargs) -> ParseResult:
        """Run ``read`` in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.read, data, **kwargs)

    # ------------------------------------------------------------------
    # Presentation part
    # ------------------------------------------------------------------

    def _read_presentation(self, package: PPTXPackage) -> PresentationInfo:
        if not package.has(PRESENTATION_PART):
            raise PresentationPartError(f"Missing mandatory part {PRESENTATION_PART}")
        try:
            root = decode_xml(package.read(PRESENTATION_PART), PRESENTATION_PART)
            relationships = load_relationships(package, PRESENTATION_PART)
            return self.presentation_parser.parse(root, relationships)
        except (MalformedXMLError, InvalidPartError, PackageError, ValueError) as exc:
            raise PresentationPartError(f"Unreadable {PRESENTATION_PART}: {exc}") from exc

    def _fail(
        self,
        reporter: _ProgressReporter,
        file_name: str,
        message: str,
        processing_time_ms: float,
    ) -> ParseResult:
        logger.error(f"Decoding {file_name} failed: {message}")
        reporter.emit(ParseStage.ERROR, reporter.progress, message)
        return ParseResult(
            success=False,
            errors=[message],
            processing_time_ms=processing_time_ms,
        )

    # ------------------------------------------------------------------
    # Slides
    # ------------------------------------------------------------------

    def _read_slides(
        self,
        state: _DecodeState,
        reporter: _ProgressReporter,
        cancel_token: Optional[CancellationToken],
    ) -> tuple[list[Slide], bool]:
        parts = state.package.numbered_parts(SLIDES_DIR, "slide")
        total = len(parts)
        span = PROGRESS_SLIDES_END - PROGRESS_PRESENTATION

        def report(done: int) -> None:
            reporter.emit(
                ParseStage.PARSING,
                PROGRESS_PRESENTATION + span * done / max(total, 1),
                f"Parsed slide {done} of {total}",
                current_slide=done,
                total_slides=total,
            )

        outcomes: list[_SlideOutcome] = []
        if self.settings.max_workers > 1 and total > 1:
            with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
                futures = [
                    executor.submit(self._parse_slide, state, number, part_name, cancel_token)
                    for number, part_name in enumerate(parts, start=1)
                ]
                for done, future in enumerate(as_completed(futures), start=1):
                    outcomes.append(future.result())
                    report(done)
        else:
            for number, part_name in enumerate(parts, start=1):
                outcome = self._parse_slide(state, number, part_name, cancel_token)
                outcomes.append(outcome)
                if outcome.skipped:
                    break
                report(number)

        outcomes.sort(key=lambda outcome: outcome.number)
        slides: list[Slide] = []
        failures = 0
        for outcome in outcomes:
            state.warnings.extend(outcome.warnings)
            state.errors.extend(outcome.errors)
            if outcome.failed:
                failures += 1
            if outcome.slide is not None:
                slides.append(outcome.slide)

        cancelled = any(outcome.skipped for outcome in outcomes)
        declared = state.info.declared_slide_count
        if not cancelled and declared and declared != total:
            state.warnings.append(
                f"Presentation declares {declared} slides but the package contains "
                f"{total} slide parts"
            )
        elif not cancelled and failures:
            logger.info(f"{failures} of {total} slides could not be parsed")
        return slides, cancelled

    def _parse_slide(
        self,
        state: _DecodeState,
        number: int,
        part_name: str,
        cancel_token: Optional[CancellationToken],
    ) -> _SlideOutcome:
        outcome = _SlideOutcome(number=number, part_name=part_name)
        if cancel_token is not None and cancel_token.cancelled:
            outcome.skipped = True
            return outcome

        sld_id = state.info.slide_id_for_part(part_name)
        slide_id = f"slide-{sld_id}" if sld_id is not None else f"slide-{number}"
        try:
            root = decode_xml(state.package.read(part_name), part_name)
            relationships = load_relationships(state.package, part_name)
            context = MappingContext(
                settings=state.import_settings,
                relationships=relationships,
                package=state.package,
                image_cache=state.image_cache,
                embed_image_data=self.settings.embed_image_data,
            )
            parsed = SlideParser(state.part_index).parse(
                root, number, part_name, slide_id, state.scale, context
            )
            outcome.slide = self._finish_slide(state, parsed.slide)
            outcome.warnings = parsed.warnings
            outcome.errors = parsed.errors
        except PPTXDomError as exc:
            message = f"Failed to parse slide {number} ({part_name}): {exc}"
            logger.warning(message)
            outcome.warnings.append(message)
            outcome.failed = True
        except Exception as exc:
            message = f"Failed to parse slide {number} ({part_name}): {exc!r}"
            logger.exception(message)
            outcome.warnings.append(message)
            outcome.failed = True
        return outcome

    def _finish_slide(self, state: _DecodeState, slide: Slide) -> Slide:
        """Apply the slide's theme and inherit a background when it has none."""
        layout = state.part_index.layout(slide.layout.part_name if slide.layout else None)
        master = state.part_index.master(layout.master_part if layout else None)
        theme_part = master.theme_part if master else None

        resolved = self._resolved_theme(state, theme_part)
        applier = ThemeApplier(resolved, master.color_map if master else None)

        background = slide.background
        if background is None and state.import_settings.include_master_background:
            if layout is not None and layout.background is not None:
                background = layout.background
            elif master is not None and master.background is not None:
                background = master.background

        return slide.model_copy(
            update={
                "elements": applier.apply(slide.elements),
                "background": applier.apply_background(background),
                "theme_id": resolved.theme.id,
            }
        )

    def _resolved_theme(self, state: _DecodeState, theme_part: Optional[str]) -> ResolvedTheme:
        """Theme for a part chain, cached by theme part name."""
        if not theme_part or not state.package.has(theme_part):
            return state.theme_cache.get_or_create(
                "default", lambda: ResolvedTheme.from_theme(default_theme())
            )

        number = self._number_of(theme_part)

        def build() -> ResolvedTheme:
            # Content warnings are reported by the theme stage
            try:
                parsed = self.theme_parser.parse_bytes(
                    state.package.read(theme_part), number, theme_part
                )
            except PPTXDomError as exc:
                state.warn_once(
                    theme_part,
                    f"Failed to read theme {number} ({theme_part}): {exc}; using the default theme",
                )
                return ResolvedTheme.from_theme(default_theme(number, theme_part))
            return ResolvedTheme.from_theme(parsed.theme)

        return state.theme_cache.get_or_create(theme_part, build)

    @staticmethod
    def _number_of(part_name: str) -> int:
        return part_number(part_name) or 1

    # ------------------------------------------------------------------
    # Masters, themes, media
    # ------------------------------------------------------------------

    def _read_masters(
        self,
        state: _DecodeState,
        cancel_token: Optional[CancellationToken],
    ) -> tuple[list[MasterSlide], bool]:
        masters: list[MasterSlide] = []
        parts = state.package.numbered_parts(SLIDE_MASTERS_DIR, "slideMaster")
        for number, part_name in enumerate(parts, start=1):
            if cancel_token is not None and cancel_token.cancelled:
                return masters, True
            try:
                root = decode_xml(state.package.read(part_name), part_name)
                relationships = load_relationships(state.package, part_name)
                context = MappingContext(
                    settings=state.import_settings,
                    relationships=relationships,
                    package=state.package,
                    image_cache=state.image_cache,
                    embed_image_data=self.settings.embed_image_data,
                    label="Master",
                )
                parsed = self.master_parser.parse(root, number, part_name, state.scale, context)

                master_info = state.part_index.master(part_name)
                resolved = self._resolved_theme(state, master_info.theme_part if master_info else None)
                applier = ThemeApplier(resolved, parsed.master.color_map)
                master = parsed.master.model_copy(
                    update={
                        "elements": applier.apply(parsed.master.elements),
                        "background": applier.apply_background(parsed.master.background),
                    }
                )
            except PPTXDomError as exc:
                state.warn_once(part_name, f"Failed to parse master {number} ({part_name}): {exc}")
                continue
            except Exception as exc:
                message = f"Failed to parse master {number} ({part_name}): {exc!r}"
                logger.exception(message)
                state.warn_once(part_name, message)
                continue

            masters.append(master)
            state.warnings.extend(parsed.warnings)
            state.errors.extend(parsed.errors)
        return masters, False

    def _read_themes(
        self,
        state: _DecodeState,
        cancel_token: Optional[CancellationToken],
    ) -> tuple[list[Theme], bool]:
        themes: list[Theme] = []
        for part_name in state.package.numbered_parts(THEMES_DIR, "theme"):
            if cancel_token is not None and cancel_token.cancelled:
                return themes, True
            number = self._number_of(part_name)
            try:
                parsed = self.theme_parser.parse_bytes(
                    state.package.read(part_name), number, part_name
                )
            except PPTXDomError as exc:
                state.warn_once(part_name, f"Failed to read theme {number} ({part_name}): {exc}")
                continue
            themes.append(parsed.theme)
            state.warnings.extend(parsed.warnings)
        return themes, False

    def _read_media(
        self,
        state: _DecodeState,
        cancel_token: Optional[CancellationToken],
    ) -> tuple[list[MediaFile], bool]:
        media: list[MediaFile] = []
        for part_name in state.package.files_under(MEDIA_DIR):
            if cancel_token is not None and cancel_token.cancelled:
                return media, True
            media_type = media_type_for(part_name)
            if media_type is None:
                message = f"Skipped media part with unknown type: {part_name}"
                logger.warning(message)
                state.warnings.append(message)
                continue
            kind, mime_type = media_type
            try:
                content = state.package.read(part_name)
            except PPTXDomError as exc:
                message = f"Failed to read media {part_name}: {exc}"
                logger.warning(message)
                state.warnings.append(message)
                continue
            media.append(
                MediaFile(
                    id=f"media-{len(media) + 1}",
                    name=posixpath.basename(part_name),
                    part_name=part_name,
                    kind=kind,
                    size=len(content),
                    mime_type=mime_type,
                    content_hash=ImageCache.digest(content),
                    data=content if self.settings.embed_media_data else None,
                )
            )
        return media, False


def decode_pptx(data: bytes, settings: Optional[Settings] = None, **kwargs) -> ParseResult:
    """Decode ``data`` with a fresh ``PPTXReader``.

    Example:
        result = decode_pptx(Path("deck.pptx").read_bytes())
        if result.success:
            print(result.data.statistics())
    """
    return PPTXReader(settings).read(data, **kwargs)
