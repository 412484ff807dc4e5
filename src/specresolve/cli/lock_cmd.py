"""``specresolve lock <manifest>``: Resolve and write the lockfile.

Resolves like ``specresolve resolve`` and writes a deterministic
``spec-lock.json`` capturing every resolved version, then reports how it
differs from the previous lockfile.

Exit Codes:
    0: Lockfile written.
    1: Resolution failed.
    2: The manifest, lockfile or a remote index could not be read.
"""

from __future__ import annotations

from pathlib import Path

import click

from specresolve.cli.resolve_cmd import configure_logging, run_or_exit
from specresolve.core.lockfile import Lockfile


@click.command("lock")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output path for the lockfile (default: the manifest's lockfile).",
)
@click.option(
    "--update", "-u", "updates",
    multiple=True,
    help="Release the lock on a package. Repeatable.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every resolution step.")
def lock_command(
    manifest: str, output: str | None, updates: tuple[str, ...], verbose: bool
) -> None:
    """Resolve MANIFEST and write its lockfile.

    Exit code 0 on success, 1 if resolution fails, 2 on unreadable input.
    """
    from specresolve.cli.output import console, print_lock_changes

    configure_logging(verbose)
    out_path = Path(output) if output else None
    run = run_or_exit(Path(manifest), out_path, updates)

    lockfile = Lockfile.from_resolution(run.result, run.project.external_sources)
    target = out_path or run.project.lockfile_path
    lockfile.write(target)

    console.print(f"Wrote [bold]{lockfile.package_count}[/bold] packages to {target}")
    print_lock_changes((run.previous or Lockfile()).diff(lockfile))
