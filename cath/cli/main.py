# cath/cli/main.py
import argparse
import json
import logging
import os
import sys
from typing import List, Optional, Tuple

from ..boundaries.index import CATH_RELEASES
from ..config import ConfigManager
from ..core.logging_config import LoggingManager
from ..error_handlers import handle_exceptions
from ..exceptions import FileOperationError, ValidationError
from ..models.structure import StructureView
from ..pipelines.models import SplitResult
from ..pipelines.split_service import DomainSplitService
from ..pipelines.writer import write_domains


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Split macromolecular structures into CATH domains')

    # Global options
    parser.add_argument('--config', type=str, help='Path to configuration file')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Increase verbosity (can be used multiple times)')
    parser.add_argument('--log-file', type=str,
                        help='Log to file in addition to stderr')
    parser.add_argument('--log-dir', type=str,
                        help='Directory for log files')
    parser.add_argument('--json', action='store_true',
                        help='Output results as JSON')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Boundary source options shared by both commands
    source_parser = argparse.ArgumentParser(add_help=False)
    source_parser.add_argument('--boundaries', type=str,
                               help='Boundary file path or URL (overrides configuration)')
    source_parser.add_argument('--release', choices=sorted(CATH_RELEASES),
                               help='Named CATH-B daily release to download')

    index_parser = subparsers.add_parser('index', parents=[source_parser],
                                         help='Load boundaries and report index statistics')
    index_parser.add_argument('--lookup', type=str, metavar='KEY',
                              help='Show domains for a structure id + chain name, e.g. 1abcA')

    split_parser = subparsers.add_parser('split', parents=[source_parser],
                                         help='Split structure files into domains')
    split_parser.add_argument('structures', nargs='+',
                              help='Structure files (.npz) to split')
    split_parser.add_argument('--output-dir', type=str,
                              help='Directory for domain files (default from configuration)')
    split_parser.add_argument('--skip-empty', action='store_true',
                              help='Do not emit domains that match no residues')
    split_parser.add_argument('--threads', type=int, default=None,
                              help='Split structures on this many threads')

    return parser


def _apply_overrides(config_manager: ConfigManager, args: argparse.Namespace) -> None:
    boundaries = config_manager.config.setdefault('boundaries', {})
    if args.boundaries:
        boundaries['source'] = args.boundaries
    elif args.release:
        boundaries['source'] = None
        boundaries['release'] = args.release

    if args.command == 'split':
        if args.skip_empty:
            config_manager.config.setdefault('extraction', {})['emit_empty_domains'] = False
        if args.threads:
            pipeline = config_manager.config.setdefault('pipeline', {})
            pipeline['use_threads'] = args.threads > 1
            pipeline['max_workers'] = args.threads


def read_structures(paths: List[str], logger: logging.Logger
                    ) -> Tuple[List[Tuple[str, StructureView]], List[SplitResult]]:
    """Load structure files; unreadable files become failed results"""
    records, failures = [], []
    for path in paths:
        structure_id = os.path.splitext(os.path.basename(path))[0]
        try:
            structure = StructureView.load(path)
        except (OSError, ValueError, KeyError, ValidationError) as e:
            error = FileOperationError(f"Unable to read structure file {path}: {str(e)}", {'path': path})
            logger.error(error.message)
            failures.append(SplitResult.failed(structure_id, error))
            continue
        records.append((structure.structure_id, structure))
    return records, failures


def run_index(args: argparse.Namespace, service: DomainSplitService) -> int:
    index = service.load_index()

    if args.lookup:
        definitions = index.lookup_key(args.lookup)
        if args.json:
            print(json.dumps({'key': args.lookup.upper(),
                              'domains': [str(d) for d in definitions]}, indent=2))
        elif not definitions:
            print(f"No domains for {args.lookup.upper()}")
        else:
            for i, definition in enumerate(definitions):
                print(f"{args.lookup.upper()} domain {i}: {definition}")
        return 0

    summary = {'source': index.source, 'chains': len(index), 'domains': index.num_domains}
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"Source: {summary['source']}")
        print(f"Chains: {summary['chains']}")
        print(f"Domains: {summary['domains']}")
    return 0


def run_split(args: argparse.Namespace, service: DomainSplitService,
              config_manager: ConfigManager, logger: logging.Logger) -> int:
    output_dir = args.output_dir or config_manager.get_path('output_dir', './output')

    records, load_failures = read_structures(args.structures, logger)
    results = service.split_batch(records)
    for failure in load_failures:
        results.add_result(failure)

    paths = write_domains(results.iter_domains(), output_dir)
    summary = results.get_summary()
    summary['files_written'] = len(paths)
    summary['output_dir'] = output_dir

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"Structures: {summary['total_structures']} "
              f"(successful: {summary['successful']}, failed: {summary['failed']})")
        print(f"Domains written: {len(paths)} to {output_dir}")
        for structure_id, error in results.failures:
            print(f"  FAILED {structure_id}: {error}", file=sys.stderr)

    return 0 if results.failure_count == 0 else 1


@handle_exceptions()
def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config_manager = ConfigManager(args.config)

    # -v forces INFO, -vv forces DEBUG; otherwise the configured level applies
    logger = LoggingManager.configure(
        verbose=(args.verbose >= 2),
        log_file=args.log_file,
        log_dir=args.log_dir,
        component="cath",
        config=config_manager.config
    )
    if args.verbose == 1:
        logging.getLogger().setLevel(logging.INFO)

    _apply_overrides(config_manager, args)
    service = DomainSplitService(config_manager)

    if args.command == 'index':
        return run_index(args, service)
    return run_split(args, service, config_manager, logger)


if __name__ == '__main__':
    sys.exit(main())
