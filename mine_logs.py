#!/usr/bin/env python3
"""
CLI tool for mining message templates from log files.

Usage:
    python mine_logs.py mine --in server.log
    python mine_logs.py partitions --in server.log
    python mine_logs.py match --in server.log --lines new.log
"""

import click
import json
import os
import sys

# Add the package to Python path
sys.path.insert(0, os.path.dirname(__file__))

from iplom import IPLoMConfig, ConfigurationError, IPLoMMiner, TemplateTrie
from iplom.config import DEFAULT_DELIMITERS
from iplom.io_utils import LogFileReader


def _build_config(delimiters: str, pst: float, cgt: float,
                  lower_bound: float, upper_bound: float, max_steps: int) -> IPLoMConfig:
    try:
        return IPLoMConfig(
            delimiters=delimiters,
            partition_support_threshold=pst,
            cluster_goodness_threshold=cgt,
            lower_bound=lower_bound,
            upper_bound=upper_bound,
            max_refinement_steps=max_steps,
        )
    except ConfigurationError as e:
        raise click.BadParameter(str(e))


def threshold_options(func):
    """Shared mining options."""
    options = [
        click.option('--delimiters', '-d',
                     default=DEFAULT_DELIMITERS,
                     show_default=True,
                     help='Characters that separate tokens'),
        click.option('--pst',
                     type=float,
                     default=0.05,
                     show_default=True,
                     help='Partition support threshold (0.0-1.0)'),
        click.option('--cgt',
                     type=float,
                     default=0.8,
                     show_default=True,
                     help='Cluster goodness threshold (0.0-1.0)'),
        click.option('--lower-bound',
                     type=float,
                     default=0.1,
                     show_default=True,
                     help='Lower bound of the 1-M split-side heuristic (<0.5)'),
        click.option('--upper-bound',
                     type=float,
                     default=0.9,
                     show_default=True,
                     help='Upper bound of the 1-M split-side heuristic (>0.5)'),
        click.option('--max-steps',
                     type=int,
                     default=None,
                     help='Stop refining after this many splits'),
        click.option('--sample-lines',
                     type=int,
                     help='Process only first N lines (for testing)'),
        click.option('--verbose', '-v',
                     is_flag=True,
                     help='Enable verbose output'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
def cli():
    """Iterative partitioning log mining."""


@cli.command()
@click.option('--input', '--in', 'input_file',
              required=True,
              type=click.Path(exists=True, dir_okay=False),
              help='Log file to mine')
@click.option('--show-lines',
              is_flag=True,
              help='Print member lines under each cluster')
@click.option('--json', 'as_json',
              is_flag=True,
              help='Print the result as JSON instead of text')
@threshold_options
def mine(input_file: str, show_lines: bool, as_json: bool,
         delimiters: str, pst: float, cgt: float,
         lower_bound: float, upper_bound: float, max_steps: int,
         sample_lines: int, verbose: bool):
    """
    Group log lines into clusters and print one template per cluster.

    Examples:

    \b
    # Mine with default thresholds
    python mine_logs.py mine --in server.log

    \b
    # Stricter clusters, show members
    python mine_logs.py mine --in server.log --cgt 0.9 --show-lines
    """
    config = _build_config(delimiters, pst, cgt, lower_bound, upper_bound, max_steps)

    try:
        miner = IPLoMMiner(config, verbose=verbose, show_progress=verbose)
        result = miner.mine_file(input_file, limit=sample_lines)

        if as_json:
            click.echo(json.dumps(result.to_dict(encode_json=True), ensure_ascii=False, indent=2))
            return

        if not result.clusters and not result.outliers:
            click.echo("No log lines found.")
            return

        click.echo(f"📋 Clusters for: {input_file}")
        click.echo("=" * 60)
        for cluster in result.clusters:
            flag = " (aborted)" if cluster.aborted else ""
            click.echo(f"[{cluster.size:6}x] {cluster.cluster_id} {cluster.template.pattern}{flag}")
            if show_lines:
                for line in cluster.lines:
                    click.echo(f"           {line.text}")

        buckets = result.outliers_by_length()
        if buckets:
            click.echo()
            click.echo("Outliers by token count:")
            for token_count, lines in buckets.items():
                click.echo(f"  {token_count:4} tokens: {len(lines)} lines")
                if show_lines:
                    for line in lines:
                        click.echo(f"           {line.text}")

        summary = result.get_summary()
        click.echo(f"\n✅ Mining completed!")
        click.echo(f"📊 Results:")
        click.echo(f"   • Total lines: {summary['total_lines']}")
        click.echo(f"   • Clusters: {summary['cluster_count']}")
        click.echo(f"   • Clustered lines: {summary['clustered_lines']} ({summary['coverage']:.1f}%)")
        click.echo(f"   • Outlier lines: {summary['outlier_lines']}")

    except KeyboardInterrupt:
        click.echo("\n❌ Mining cancelled by user")
        sys.exit(1)
    except Exception as e:
        click.echo(f"\n❌ Error during mining: {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


@cli.command()
@click.option('--input', '--in', 'input_file',
              required=True,
              type=click.Path(exists=True, dir_okay=False),
              help='Log file to partition')
@click.option('--delimiters', '-d',
              default=DEFAULT_DELIMITERS,
              show_default=True,
              help='Characters that separate tokens')
@click.option('--show-lines',
              is_flag=True,
              help='Print member lines under each partition')
def partitions(input_file: str, delimiters: str, show_lines: bool):
    """Print the token-count partitions of a log file."""
    try:
        miner = IPLoMMiner(IPLoMConfig(delimiters=delimiters))
        groups = miner.partition_by_length(LogFileReader(input_file))

        for token_count, partition in groups.items():
            click.echo(f"{token_count:4} tokens: {partition.size} lines")
            if show_lines:
                for line in partition.lines:
                    click.echo(f"      {line.text}")

    except Exception as e:
        click.echo(f"❌ Error partitioning log file: {e}")
        sys.exit(1)


@cli.command()
@click.option('--input', '--in', 'input_file',
              required=True,
              type=click.Path(exists=True, dir_okay=False),
              help='Log file to mine templates from')
@click.option('--lines', 'lines_file',
              required=True,
              type=click.Path(exists=True, dir_okay=False),
              help='Log file whose lines are matched against the mined templates')
@threshold_options
def match(input_file: str, lines_file: str,
          delimiters: str, pst: float, cgt: float,
          lower_bound: float, upper_bound: float, max_steps: int,
          sample_lines: int, verbose: bool):
    """Mine templates from one file and assign the lines of another to them."""
    config = _build_config(delimiters, pst, cgt, lower_bound, upper_bound, max_steps)

    try:
        miner = IPLoMMiner(config, verbose=verbose)
        result = miner.mine_file(input_file, limit=sample_lines)
        trie = TemplateTrie.from_result(result, config)

        if verbose:
            click.echo(f"Built trie with {trie.size()} templates")

        total = matched = 0
        for line in LogFileReader(lines_file, limit=sample_lines):
            total += 1
            best = trie.get_best_match(line)
            if best:
                matched += 1
                click.echo(f"{best.cluster_id}\t{best.confidence:.3f}\t{line}")
            else:
                click.echo(f"-\t-\t{line}")

        match_rate = (matched / total * 100) if total > 0 else 0
        click.echo(f"\n✅ Matched {matched}/{total} lines ({match_rate:.1f}%)")

    except KeyboardInterrupt:
        click.echo("\n❌ Matching cancelled by user")
        sys.exit(1)
    except Exception as e:
        click.echo(f"\n❌ Error during matching: {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    cli()
