"""``specresolve resolve <manifest>``: Resolve a project's dependencies.

Loads the YAML manifest, seeds the resolver with the versions pinned by the
existing lockfile (minus any ``--update`` packages), and prints the
specifications each target receives.

Exit Codes:
    0: Resolution succeeded.
    1: Resolution failed (missing package, conflict, platform mismatch).
    2: The manifest, lockfile or a remote index could not be read.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import click

from specresolve.core.dependency import (
    Consumer,
    LockedDependency,
    Specification,
    resolve,
)
from specresolve.core.lockfile import Lockfile
from specresolve.core.manifest import Project, load_manifest
from specresolve.core.sources import HeadRegistry
from specresolve.exceptions import (
    LockfileError,
    ManifestError,
    ResolutionError,
    SourceError,
)

logger = logging.getLogger(__name__)


@dataclass
class ResolutionRun:
    """Outcome of resolving a manifest from the command line."""

    project: Project
    result: dict[Consumer, list[Specification]]
    head_names: list[str]
    previous: Lockfile | None


def configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


def feasible_locks(
    locks: Sequence[LockedDependency], consumers: Sequence[Consumer]
) -> list[LockedDependency]:
    """Drop locks that a consumer's current top-level requirements rule out.

    A lock survives only while every top-level requirement on its root
    still accepts the pinned version from a regular source, so editing a
    requirement in the manifest releases the lock without ``--update``.
    """
    kept = []
    for lock in locks:
        changed = any(
            r.head or r.external_source is not None
            or not r.is_satisfied_by(lock.pinned_version)
            for c in consumers for r in c.requirements
            if r.root_name == lock.name
        )
        if changed:
            logger.info("Releasing lock on %s %s", lock.name, lock.pinned_version)
        else:
            kept.append(lock)
    return kept


def run_resolution(
    manifest: Path,
    lockfile: Path | None,
    updates: Sequence[str],
    use_lockfile: bool = True,
) -> ResolutionRun:
    """Load *manifest* and resolve it, honouring the existing lockfile.

    Raises:
        ManifestError, LockfileError, SourceError: On unreadable input.
        ResolutionError: If resolution fails.
    """
    project = load_manifest(manifest)
    lock_path = lockfile or project.lockfile_path
    previous = None
    if use_lockfile and lock_path.exists():
        previous = Lockfile.read(lock_path)
        logger.info("Using locked versions from %s", lock_path)
    locked = previous.locked_dependencies(exclude=updates) if previous else []
    locked = feasible_locks(locked, project.consumers)

    heads = HeadRegistry()
    result = resolve(
        project.consumers,
        project.source,
        locked_dependencies=locked,
        pinned=project.pinned,
        head_store=heads,
    )
    return ResolutionRun(project, result, heads.head_names, previous)


def run_or_exit(
    manifest: Path, lockfile: Path | None, updates: Sequence[str], use_lockfile: bool = True
) -> ResolutionRun:
    """Like ``run_resolution`` but reports failures and exits."""
    from specresolve.cli.output import print_failure

    try:
        return run_resolution(manifest, lockfile, updates, use_lockfile)
    except ResolutionError as exc:
        print_failure(exc)
        sys.exit(1)
    except (ManifestError, LockfileError, SourceError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)


@click.command("resolve")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--lockfile", "-l",
    type=click.Path(dir_okay=False),
    default=None,
    help="Lockfile to honour (default: the manifest's lockfile).",
)
@click.option(
    "--update", "-u", "updates",
    multiple=True,
    help="Release the lock on a package. Repeatable.",
)
@click.option("--no-lock", is_flag=True, help="Ignore the existing lockfile.")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Log every resolution step.")
def resolve_command(
    manifest: str,
    lockfile: str | None,
    updates: tuple[str, ...],
    no_lock: bool,
    output_json: bool,
    verbose: bool,
) -> None:
    """Resolve the dependencies declared in MANIFEST and show them per target.

    Exit code 0 on success, 1 if resolution fails, 2 on unreadable input.
    """
    from specresolve.cli.output import print_resolution, result_to_json

    configure_logging(verbose)
    run = run_or_exit(
        Path(manifest), Path(lockfile) if lockfile else None, updates, not no_lock
    )
    if output_json:
        click.echo(json.dumps(result_to_json(run.result), indent=2, sort_keys=True))
    else:
        print_resolution(run.result, run.head_names)
