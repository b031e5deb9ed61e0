# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Per-reference reconciliation pipeline and all-or-nothing run orchestration."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .catalog import PatternCatalog
from .config.models import Config
from .diagnostics import Diagnostic, DiagnosticLog
from .discovery import discover_files
from .documents import DocumentStrategy, SerializeOptions, strategy_for_path
from .errors import ConfigurationInconsistency, IntegrityMattersError
from .hashing import format_integrity, reconcile_hashes
from .models import MatchResult, ReconciliationVerdict, Reference, ReferenceUpdate
from .reachability import Probe, ReachabilityVerifier
from .rewriter import ReferenceRewriter
from .sources import DependencySnapshot
from .versioning import VersionReconciler

_REMOTE_PREFIXES: Final[tuple[str, ...]] = ("http://", "https://", "//")
NO_FILES_MESSAGE: Final[str] = "No matching files specified by `--file` were found."


@dataclass(frozen=True, slots=True)
class ReferenceOutcome:
    """Result of running one reference through the pipeline.

    ``update`` is ``None`` when the reference is left exactly as written,
    either because no catalog pattern matched or because nothing changed.
    """

    reference: Reference
    match: MatchResult | None
    verdict: ReconciliationVerdict | None
    update: ReferenceUpdate | None
    diagnostics: tuple[Diagnostic, ...] = ()


class ReferencePipeline:
    """Match, reconcile, hash, rewrite and verify individual references.

    The pipeline only reads the shared :class:`DependencySnapshot` and keeps
    diagnostics per call, so one instance may serve many worker threads.
    """

    def __init__(
        self,
        config: Config,
        snapshot: DependencySnapshot,
        *,
        catalog: PatternCatalog | None = None,
        verifier: ReachabilityVerifier | None = None,
    ) -> None:
        self._config = config
        self._snapshot = snapshot
        self._catalog = catalog or PatternCatalog.from_config(config)
        self._reconciler = VersionReconciler(force=config.force_integrity_checks)
        self._rewriter = ReferenceRewriter(self._catalog, cwd=config.root, local=config.local)
        self._verifier = verifier or ReachabilityVerifier(timeout=config.fetch_timeout)

    def process(self, reference: Reference) -> ReferenceOutcome:
        """Run ``reference`` through every stage.

        Raises:
            IntegrityMattersError: On any fatal inconsistency, carrying the
                diagnostics logged for ``reference`` up to the failure.
        """

        log = DiagnosticLog()
        try:
            return self._process(reference, log)
        except IntegrityMattersError as exc:
            log.error(f"ERROR: {exc}")
            exc.diagnostics = tuple(log)
            raise

    def _process(self, reference: Reference, log: DiagnosticLog) -> ReferenceOutcome:
        match = self._catalog.match(reference.location)
        if match is None:
            return ReferenceOutcome(reference, None, None, None)

        name = match.package_name
        verdict = self._reconciler.reconcile(name, match.declared_version, self._snapshot.sources_for(name), log)
        if not verdict.rewrites and not self._config.force_integrity_checks:
            return ReferenceOutcome(reference, match, verdict, None, tuple(log))

        update = self._build_update(reference, match, verdict, log)
        return ReferenceOutcome(reference, match, verdict, update, tuple(log))

    def _build_update(
        self,
        reference: Reference,
        match: MatchResult,
        verdict: ReconciliationVerdict,
        log: DiagnosticLog,
    ) -> ReferenceUpdate:
        config = self._config
        rewrite = self._rewriter.rewrite(
            reference.location,
            match,
            verdict,
            cdn_hint=reference.cdn,
            require_local=not verdict.degraded,
        )

        if rewrite.local_file.is_file():
            hashes = reconcile_hashes(rewrite.local_file, reference.integrity, reference.algorithms, config.algorithms, log)
            new_integrity = format_integrity(hashes)
        else:
            log.warn(
                f"WARNING: The local path {rewrite.local_file} could not be found; keeping the existing integrity."
            )
            hashes = {}
            new_integrity = reference.integrity

        if not config.local and not config.ignore_url_fetches and rewrite.new_location.startswith(_REMOTE_PREFIXES):
            self._verifier.verify(rewrite.new_location, config.url_integrity_check, hashes, log)

        add_crossorigin: str | bool | None
        if config.local:
            add_crossorigin = False
        else:
            add_crossorigin = config.add_crossorigin or reference.crossorigin
        return ReferenceUpdate(
            new_location=rewrite.new_location,
            local_path=rewrite.local_path,
            new_integrity=new_integrity,
            add_crossorigin=add_crossorigin,
            local=config.local,
            omit_local_integrity=config.no_local_integrity,
            fallback=config.fallback or reference.fallback,
            global_check=config.global_check_for(match.package_name, reference.kind.value) or reference.global_check,
        )


@dataclass(slots=True)
class DocumentJob:
    """One input document with its parsed references."""

    source: Path
    output: Path
    strategy: DocumentStrategy
    references: tuple[Reference, ...]


@dataclass(frozen=True, slots=True)
class DocumentReport:
    """Outcomes for one document plus where it was written, if anywhere."""

    source: Path
    output: Path
    outcomes: tuple[ReferenceOutcome, ...]
    written: bool
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(frozen=True, slots=True)
class RunReport:
    """Everything produced by a successful run."""

    preamble: tuple[Diagnostic, ...]
    documents: tuple[DocumentReport, ...]

    def diagnostics(self) -> Iterator[Diagnostic]:
        """Yield diagnostics in document order, then reference order."""

        yield from self.preamble
        for document in self.documents:
            for outcome in document.outcomes:
                yield from outcome.diagnostics
            yield from document.diagnostics


class IntegrityRun:
    """Process every configured document, writing only when all references succeed.

    Args:
        config: Validated run configuration.
        snapshot: Preloaded dependency sources; loaded from ``config.root`` when omitted.
        probe: Reachability probe override.
    """

    def __init__(
        self,
        config: Config,
        *,
        snapshot: DependencySnapshot | None = None,
        probe: Probe | None = None,
    ) -> None:
        self._config = config
        self._snapshot = snapshot
        self._probe = probe

    def execute(self) -> RunReport:
        """Run the whole invocation.

        Returns:
            RunReport: Per-document outcomes and diagnostics.

        Raises:
            IntegrityMattersError: On the first fatal reference failure; no
                document is written in that case.
        """

        config = self._config
        root = config.root
        expand = not (config.no_globs or config.output_path)
        files = discover_files(config.file, root, expand_globs=expand)
        if not files:
            raise ConfigurationInconsistency(NO_FILES_MESSAGE)

        snapshot = self._snapshot or DependencySnapshot.load(root)
        jobs = [self._prepare(index, path, root) for index, path in enumerate(files)]
        pipeline = ReferencePipeline(
            config,
            snapshot,
            verifier=ReachabilityVerifier(self._probe, timeout=config.fetch_timeout),
        )
        outcomes = self._fan_out(pipeline, jobs)

        reports: list[DocumentReport] = []
        options = SerializeOptions(
            json_space=config.json_space,
            disclaimer=config.disclaimer,
            drop_modules=config.drop_modules,
        )
        for job, document_outcomes in zip(jobs, outcomes, strict=True):
            for outcome in document_outcomes:
                if outcome.update is not None:
                    job.strategy.apply_update(outcome.reference, outcome.update)
            log = DiagnosticLog()
            if not config.dry_run:
                job.output.write_text(job.strategy.serialize(options), encoding="utf-8")
                log.info(f"INFO: Finished writing to {job.output}")
            reports.append(
                DocumentReport(
                    source=job.source,
                    output=job.output,
                    outcomes=tuple(document_outcomes),
                    written=not config.dry_run,
                    diagnostics=tuple(log),
                )
            )
        return RunReport(preamble=snapshot.diagnostics, documents=tuple(reports))

    def _prepare(self, index: int, path: Path, root: Path) -> DocumentJob:
        output_paths = self._config.output_path
        output = Path(output_paths[index]) if index < len(output_paths) else path
        if not output.is_absolute():
            output = root / output
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise IntegrityMattersError(f"Unable to read {path}: {exc}") from exc
        strategy = strategy_for_path(path)
        references = tuple(strategy.extract_references(content))
        return DocumentJob(source=path, output=output, strategy=strategy, references=references)

    def _fan_out(self, pipeline: ReferencePipeline, jobs: Sequence[DocumentJob]) -> list[list[ReferenceOutcome]]:
        results: list[list[ReferenceOutcome | None]] = [[None] * len(job.references) for job in jobs]
        with ThreadPoolExecutor(max_workers=self._config.jobs) as executor:
            future_map: dict[Future[ReferenceOutcome], tuple[int, int]] = {
                executor.submit(pipeline.process, reference): (doc_index, ref_index)
                for doc_index, job in enumerate(jobs)
                for ref_index, reference in enumerate(job.references)
            }
            for future in as_completed(future_map):
                try:
                    outcome = future.result()
                except IntegrityMattersError:
                    for pending in future_map:
                        pending.cancel()
                    raise
                doc_index, ref_index = future_map[future]
                results[doc_index][ref_index] = outcome
        return [[outcome for outcome in row if outcome is not None] for row in results]


__all__ = [
    "NO_FILES_MESSAGE",
    "DocumentReport",
    "IntegrityRun",
    "ReferenceOutcome",
    "ReferencePipeline",
    "RunReport",
]
