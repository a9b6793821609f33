"""
Global Defense Index CLI.

Commands:
    bootstrap                      Seed the shared document if it is empty
    rankings <domain>              Print the ranked entities of a domain
    stats <domain>                 Print the stat definitions grouped by category
    compare <domain> <left> <right>
                                   Compare two entities stat by stat
    search <domain> <query>        Find an entity, generating it when missing
    watch                          Print rankings whenever the document changes

Domains: nations, aircraft
"""

import argparse
import asyncio
import sys

from defense_index.app import DefenseIndexApp
from defense_index.comparison import LEFT, RIGHT, format_stat_value
from defense_index.config import POLL_INTERVAL_SECONDS
from defense_index.exceptions import DefenseIndexBaseError
from defense_index.logging_config import create_logger, log_exception
from defense_index.models import DOMAINS

logger = create_logger(__name__)


class Colors:
    HEADER = "\033[95m"
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


def print_header(text: str) -> None:
    print(f"\n{Colors.BOLD}{Colors.HEADER}{text}{Colors.ENDC}")


def print_success(text: str) -> None:
    print(f"{Colors.GREEN}✓ {text}{Colors.ENDC}")


def print_error(text: str) -> None:
    print(f"{Colors.RED}✗ {text}{Colors.ENDC}", file=sys.stderr)


def print_rankings(coordinator) -> None:
    print_header(f"{coordinator.spec.label} Rankings")
    for entity in coordinator.entities:
        marker = " (generated)" if entity.is_generated else ""
        print(f"  {entity.rank:>3}. {entity.name:<30} {entity.score:>6}{marker}")


def rankings(app: DefenseIndexApp, args) -> int:
    print_rankings(app.domain(args.domain))
    return 0


def show_stats(app: DefenseIndexApp, args) -> int:
    coordinator = app.domain(args.domain)
    print_header(f"{coordinator.spec.label} Stats")
    for category, definitions in coordinator.stats_by_category.items():
        print(f"\n{Colors.BOLD}{category or '(uncategorized)'}{Colors.ENDC}")
        for definition in definitions:
            print(f"  {definition.id:<20} {definition.label:<30} {definition.format.value}")
    return 0


def compare(app: DefenseIndexApp, args) -> int:
    coordinator = app.domain(args.domain)
    try:
        comparison = coordinator.compare(args.left, args.right)
    except KeyError as e:
        print_error(str(e))
        return 1

    print_header(f"{comparison.left.name} vs {comparison.right.name}")
    for row in comparison.rows:
        left = format_stat_value(row.definition, row.left_value)
        right = format_stat_value(row.definition, row.right_value)
        if row.leader == LEFT:
            left = f"{Colors.GREEN}{left}{Colors.ENDC}"
        elif row.leader == RIGHT:
            right = f"{Colors.GREEN}{right}{Colors.ENDC}"
        print(f"  {row.definition.label:<30} {left:>24}  {right:<24}")

    print(
        f"\n  Stats led: {comparison.stats_won(LEFT)} - {comparison.stats_won(RIGHT)}"
    )

    if args.analyze:
        analysis = coordinator.analyze(args.left, args.right)
        if analysis is None:
            print_error("AI analysis unavailable")
            return 1
        print(f"\n{Colors.BOLD}Analysis:{Colors.ENDC} {analysis.analysis}")
        print(f"{Colors.BOLD}Predicted winner:{Colors.ENDC} {analysis.winner}")
        for factor in analysis.factors:
            print(f"  - {factor}")
    return 0


def search(app: DefenseIndexApp, args) -> int:
    coordinator = app.domain(args.domain)
    if args.user:
        app.auth.sign_in(args.user)
    result = coordinator.search_or_generate(args.query)
    if result is None:
        print_error("Empty query")
        return 1
    entity = result.entity
    if result.generated:
        print_success(f"Generated {entity.name} ({entity.id}) at rank {entity.rank}")
    else:
        print_success(f"Found {entity.name} ({entity.id}) at rank {entity.rank}")
    return 0


def bootstrap(app: DefenseIndexApp, args) -> int:
    print_success("Shared document ready")
    return 0


def watch(app: DefenseIndexApp, args) -> int:
    def _on_change(snapshot):
        if snapshot.loaded:
            print_rankings(app.domain(snapshot.domain))

    app.nations.subscribe(_on_change)
    app.aircraft.subscribe(_on_change)
    try:
        asyncio.run(app.channel.watch(args.interval))
    except KeyboardInterrupt:
        print("\nStopped watching")
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Global Defense Index CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    bootstrap_parser = subparsers.add_parser("bootstrap", help="Seed the shared document if empty")
    bootstrap_parser.set_defaults(func=bootstrap)

    rankings_parser = subparsers.add_parser("rankings", help="Print ranked entities")
    rankings_parser.add_argument("domain", choices=list(DOMAINS))
    rankings_parser.set_defaults(func=rankings)

    stats_parser = subparsers.add_parser("stats", help="Print stat definitions")
    stats_parser.add_argument("domain", choices=list(DOMAINS))
    stats_parser.set_defaults(func=show_stats)

    compare_parser = subparsers.add_parser("compare", help="Compare two entities")
    compare_parser.add_argument("domain", choices=list(DOMAINS))
    compare_parser.add_argument("left", help="Id of the first entity")
    compare_parser.add_argument("right", help="Id of the second entity")
    compare_parser.add_argument("--analyze", action="store_true", help="Add an AI analysis")
    compare_parser.set_defaults(func=compare)

    search_parser = subparsers.add_parser("search", help="Find or generate an entity")
    search_parser.add_argument("domain", choices=list(DOMAINS))
    search_parser.add_argument("query", help="Name to look up")
    search_parser.add_argument("--user", help="Identity to sign in as before searching")
    search_parser.set_defaults(func=search)

    watch_parser = subparsers.add_parser("watch", help="Print rankings on every change")
    watch_parser.add_argument("--interval", type=float, default=POLL_INTERVAL_SECONDS,
                              help="Polling interval in seconds")
    watch_parser.set_defaults(func=watch)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    try:
        with DefenseIndexApp.from_config() as app:
            return args.func(app, args)
    except DefenseIndexBaseError as e:
        print_error(str(e))
        return 1
    except Exception as e:
        log_exception(logger, e, context=f"command '{args.command}'")
        raise


if __name__ == "__main__":
    sys.exit(main())
