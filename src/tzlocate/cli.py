"""Command line access to timezone region lookup.

Examples:
    tzlocate lookup 47.4979 19.0402
    tzlocate lookup --data zones.geojson --policy first 3 3
    tzlocate candidates 47.4979 19.0402
    tzlocate stats
"""

import logging
import sys

import click
from munch import Munch

from tzlocate.errors import TzLocateError
from tzlocate.geo.resolver import AmbiguityPolicy, Ambiguous, Zone
from tzlocate.geo.service import LookupService, service_from_geojson
from tzlocate.utils.trace_utils import str_exc_chain
from tzlocate.utils.yaml_utils import yaml_dump_cozy

EXIT_NO_MATCH = 1
EXIT_ERROR = 2

data_option = click.option(
    "--data",
    "-d",
    "data",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="GeoJSON FeatureCollection of timezone polygons (default: data.geojson from config)",
)


class CliError(click.ClickException):
    exit_code = EXIT_ERROR


def _service(data: str | None, policy: str | None = None) -> LookupService:
    try:
        return service_from_geojson(data, policy=policy)
    except (TzLocateError, ValueError) as e:
        raise CliError(str_exc_chain(e)) from e


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """Timezone region lookup CLI.

    Coordinates are given as LAT LON in the frame of the polygon data.
    Use `--` before negative coordinates: tzlocate lookup -- -33.87 151.21
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@cli.command(name="lookup")
@data_option
@click.option(
    "--policy",
    "-p",
    type=click.Choice([p.value for p in AmbiguityPolicy]),
    default=None,
    help="Ambiguity policy (default: resolver.ambiguity from config)",
)
@click.argument("lat", type=float)
@click.argument("lon", type=float)
def cli_command_lookup(data, policy, lat, lon):
    """Print the zone id containing LAT LON.

    Prints `AMBIGUOUS: a, b` when several zones contain the point, and
    `NO MATCH` (exit code 1) when none does.
    """
    service = _service(data, policy)
    try:
        resolution = service.resolve(lat, lon)
    except (TzLocateError, ValueError) as e:
        raise CliError(str_exc_chain(e)) from e
    for fault in resolution.faults:
        click.echo(f"warning: skipped {fault.zone_id} (region {fault.handle}): {fault.reason}", err=True)
    if isinstance(resolution, Zone):
        click.echo(resolution.zone_id)
    elif isinstance(resolution, Ambiguous):
        click.echo(f"AMBIGUOUS: {', '.join(sorted(resolution.zone_ids))}")
    else:
        click.echo("NO MATCH")
        sys.exit(EXIT_NO_MATCH)


@cli.command(name="candidates")
@data_option
@click.argument("lat", type=float)
@click.argument("lon", type=float)
def cli_command_candidates(data, lat, lon):
    """Print the zone ids whose bounding box contains LAT LON, one per line."""
    service = _service(data)
    try:
        regions = service.candidates(lat, lon)
    except ValueError as e:
        raise CliError(str_exc_chain(e)) from e
    for region in regions:
        click.echo(region.zone_id)


@cli.command(name="stats")
@data_option
def cli_command_stats(data):
    """Print region and index statistics as YAML."""
    snapshot = _service(data).snapshot
    envelope = snapshot.index.envelope
    stats = Munch(
        regions=len(snapshot.store),
        zones=len(snapshot.store.zone_ids()),
        defective=len(snapshot.store.defective()),
        index=Munch(
            backend=type(snapshot.index).__name__,
            depth=getattr(snapshot.index, "depth", None),
            nodes=getattr(snapshot.index, "node_count", None),
            bounds=list(envelope.bounds) if envelope is not None else None,
        ),
        policy=snapshot.resolver.policy.value,
    )
    click.echo(yaml_dump_cozy(stats), nl=False)


if __name__ == "__main__":  # pragma: no cover
    cli()  # pylint: disable=no-value-for-parameter
