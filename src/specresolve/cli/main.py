"""specresolve CLI: Dependency resolution for package manifests.

Entry point for the ``specresolve`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    resolve: Resolve a manifest and show the specifications per target.
    lock: Resolve a manifest and write its lockfile.

Usage::

    specresolve resolve ./specs.yaml
    specresolve resolve ./specs.yaml --update AFNetworking --json
    specresolve lock ./specs.yaml -o ./spec-lock.json
"""

from __future__ import annotations

import click

from specresolve import __version__
from specresolve.cli.lock_cmd import lock_command
from specresolve.cli.resolve_cmd import resolve_command


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """specresolve: Backtracking dependency resolution.

    Resolve every target of a project manifest to exactly one version per
    package, honouring locked versions and platform requirements.
    """


cli.add_command(resolve_command)
cli.add_command(lock_command)
