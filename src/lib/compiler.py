"""
Document compiler and builder

compile_text() is the per-document pipeline: macros first, then the
translator or minifier that matches the file type.

The Builder turns targets into per-file jobs and runs them on a thread
pool. Every job owns its input and output file; a job that fails is
reported on its own and never stops the others.
"""

import os
import shutil
import contextvars
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Union

from ..models.errors import CompileError
from ..models.targets import BuildJob, BuildMode, FileType, JobResult, Target
from .css import minify_css
from .gemtext import translate_gemtext
from .html import minify_html
from .log import LOG
from .macros import MacroEngine, MacroRegistry
from .markdown import translate_markdown


def compile_text(
    text: str,
    path: Union[str, Path],
    file_type: FileType,
    strict: bool = False,
    registry: Optional[MacroRegistry] = None,
) -> str:
    """
    Compile one document

    Args:
        text: Document source
        path: Document path (macro includes resolve relative to it)
        file_type: Decides the stage that runs after macro expansion
        strict: Mismatched HTML closing tags are errors
        registry: Macro registry (built-ins if omitted)

    Returns:
        Compiled text

    Raises:
        CompileError: from the macro engine, the HTML minifier or the
                      Gemtext translator
    """
    expanded = MacroEngine(path, registry=registry, strict=strict).expand(text)

    if file_type is FileType.HTML:
        return minify_html(path, expanded, strict=strict)
    if file_type is FileType.CSS:
        return minify_css(expanded)
    if file_type is FileType.GEMTEXT:
        return translate_gemtext(path, expanded)
    if file_type is FileType.MARKDOWN:
        return translate_markdown(expanded)
    return expanded


def jobs_collect(target: Target) -> List[BuildJob]:
    """
    Expand a target into per-file jobs

    A file (or symlink) target is one job. A directory target is walked
    recursively; its files keep their relative layout under the target's
    output and get their file type from their own extension unless the
    target forces one.
    """
    if target.path.is_file() or target.path.is_symlink():
        file_type = target.file_type or FileType.from_path(target.path)
        return [BuildJob(target.path, target.output, target.mode, file_type, target.path)]

    jobs = []
    for dirpath, dirnames, filenames in os.walk(target.path):
        dirnames.sort()
        relative = Path(dirpath).relative_to(target.path)
        for filename in sorted(filenames):
            source = Path(dirpath) / filename
            file_type = target.file_type or FileType.from_path(source)
            jobs.append(BuildJob(
                source=source,
                output=target.output / relative / filename,
                mode=target.mode,
                file_type=file_type,
                target=target.path,
            ))
    return jobs


class Builder:
    """
    Builds jobs concurrently

    Responsibilities:
    - Expand targets into jobs
    - Run each job (compile, copy or link) on a worker thread
    - Collect one JobResult per job, failures included
    """

    def __init__(
        self,
        targets: List[Target],
        max_workers: Optional[int] = None,
        strict: bool = False,
    ) -> None:
        """
        Initialize builder

        Args:
            targets: Resolved build targets
            max_workers: Worker threads (executor default if None)
            strict: Mismatched HTML closing tags are errors
        """
        self.targets = targets
        self.max_workers = max_workers
        self.strict = strict

    def build(self) -> List[JobResult]:
        """
        Build every file of every target

        Returns:
            JobResults in job order
        """
        jobs: List[BuildJob] = []
        results: List[JobResult] = []
        for target in self.targets:
            if not target.path.exists() and not target.path.is_symlink():
                missing = BuildJob(target.path, target.output, target.mode, FileType.UNKNOWN, target.path)
                results.append(JobResult(missing, False, f"Target {target.path} does not exist"))
                continue
            jobs.extend(jobs_collect(target))

        LOG(f"Building {len(jobs)} files from {len(self.targets)} targets", level=2)

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="build") as executor:
            # Workers log with the caller's verbosity
            futures = {
                executor.submit(contextvars.copy_context().run, self.job_run, job): index
                for index, job in enumerate(jobs)
            }
            ordered: List[Optional[JobResult]] = [None] * len(jobs)
            for future in as_completed(futures):
                ordered[futures[future]] = future.result()

        return results + [result for result in ordered if result is not None]

    def job_run(self, job: BuildJob) -> JobResult:
        """Run one job, turning its failure into a failed JobResult"""
        try:
            job.output.parent.mkdir(parents=True, exist_ok=True)
            if job.mode is BuildMode.COMPILE:
                self.file_compile(job)
            elif job.mode is BuildMode.COPY:
                shutil.copy2(job.source, job.output)
            else:
                if job.output.exists() or job.output.is_symlink():
                    job.output.unlink()
                os.link(job.source, job.output)
        except CompileError as e:
            LOG(f"Failed to compile {job.source}: {e}", level=1)
            return JobResult(job, False, f"Failed to compile target {job.target}: {e}")
        except OSError as e:
            LOG(f"Failed to {job.mode.value} {job.source}: {e}", level=1)
            return JobResult(job, False, f"Failed to {job.mode.value} target {job.target}: {e}")
        except Exception as e:
            # Reported with this job only; build() keeps collecting the rest
            LOG(f"Unexpected {type(e).__name__} building {job.source}: {e}", level=1)
            return JobResult(
                job, False, f"Failed to {job.mode.value} target {job.target}: {type(e).__name__}: {e}"
            )

        LOG(f"{job.mode.value}: {job.source} -> {job.output}", level=2)
        return JobResult(job, True)

    def file_compile(self, job: BuildJob) -> None:
        try:
            source = job.source.read_text(encoding='utf-8')
        except UnicodeDecodeError as e:
            raise OSError(f"{job.source} is not valid UTF-8: {e}") from e
        compiled = compile_text(source, job.source, job.file_type, strict=self.strict)
        job.output.write_text(compiled, encoding='utf-8')
