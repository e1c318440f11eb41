#!/usr/bin/env python3
# Path: doc2xbrl/main.py
"""
doc2xbrl - Main Entry Point

Converts financial documents (PDF, Excel, CSV, JSON, XBRL) into XBRL
instance documents.

Data Flow:
    INPUT:   source document (file on disk)
    PROCESS: parsing, taxonomy matching, job orchestration
    OUTPUT:  XBRL instance (output directory or --output path)

Usage:
    python main.py convert report.csv                 # Convert a document
    python main.py convert report.xlsx --currency EUR # Override currency
    python main.py convert report.csv --store database # Use the configured database
    python main.py formats                            # List supported formats
    python main.py init-db                            # Create tables, seed taxonomy

Prerequisites:
    - Configured .env file (optional, every setting has a default)
"""

import argparse
import sys
from pathlib import Path

# Ensure doc2xbrl root is in path
sys.path.insert(0, str(Path(__file__).parent))

from config_loader import ConfigLoader
from core.data_paths import DataPathsManager
from core.logger import setup_ipo_logging, get_input_logger
from parsers.registry import ParserRegistry
from process.jobs import ConversionOptions, ConversionService, InlineScheduler
from constants import (
    JobStatus, StoreBackend,
    STATUS_OK, STATUS_FAIL, STATUS_INFO, STATUS_WARN,
    MENU_HEADER, MENU_SEPARATOR,
)


def print_banner() -> None:
    """Print application banner."""
    print()
    print(MENU_HEADER)
    print("  DOC2XBRL - Financial Document to XBRL Conversion")
    print(MENU_HEADER)
    print()


def print_system_info(config: ConfigLoader) -> None:
    """
    Print system configuration information.

    Args:
        config: ConfigLoader instance
    """
    print(f"  Environment: {config.get('environment')}")
    print(f"  Framework:   {config.get('default_framework')}")
    print(f"  Output:      {config.get('output_dir')}")
    print()


def list_formats(registry: ParserRegistry) -> int:
    """
    Print supported input formats.

    Args:
        registry: Parser registry

    Returns:
        Exit code
    """
    formats = registry.supported_formats()
    print(f"\n{STATUS_OK} {len(formats)} supported formats:\n")
    for format_id in formats:
        parser = registry.resolve(format_id)
        print(f"  {format_id:<8} {type(parser).__name__}")
    print()
    return 0


def output_path_for(source: Path, config: ConfigLoader, output: str = None) -> Path:
    """
    Where the instance for `source` is written.

    Args:
        source: Source document path
        config: Configuration loader
        output: Explicit output path

    Returns:
        Output path
    """
    if output:
        return Path(output)
    return Path(config.get('output_dir')) / f"{source.stem}.xbrl"


def run_convert(args, config: ConfigLoader, logger) -> int:
    """
    Convert one document through the full job pipeline.

    Args:
        args: Parsed arguments
        config: Configuration loader
        logger: Logger instance

    Returns:
        Exit code (0 for success)
    """
    source = Path(args.file)
    if not source.is_file():
        print(f"\n{STATUS_FAIL} File not found: {source}")
        return 1

    logger.info(f"Converting {source}")

    service = ConversionService.from_config(
        config,
        scheduler=InlineScheduler(sleep=not args.no_wait),
        backend=args.store,
        database_url=args.database,
    )
    document_id = service.upload_document(
        source.read_bytes(),
        source.name,
        format=args.format or '',
    )
    options = ConversionOptions.from_config(
        config,
        target_framework=args.framework,
        target_currency=args.currency,
        sector=args.sector,
        company_name=args.company,
    )

    result = service.initiate_conversion(document_id, options)
    job = service.get_job(result.job_id)

    print(f"  Job:      {job.id}")
    print(f"  Status:   {job.status.value} ({job.progress}%)")
    if job.retry_count:
        print(f"  Retries:  {job.retry_count}")

    if job.status != JobStatus.COMPLETED:
        print(f"\n{STATUS_FAIL} Conversion failed: {job.error_message}")
        for entry in job.processing_log:
            if entry.error:
                print(f"  - {entry.step}: {entry.error}")
        return 1

    metadata = job.output_metadata
    matching = metadata.get('matching', {})
    print(f"  Facts:    {metadata.get('total_facts', 0)}")
    print(
        f"  Mapped:   {matching.get('matched', 0)}/{matching.get('total_items', 0)} items"
    )

    target = output_path_for(source, config, args.output)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(service.fetch_output(job.id))

    issues = metadata.get('validation_issues', [])
    if issues:
        print(f"\n{STATUS_WARN} {len(issues)} validation issues:")
        print(f"  {MENU_SEPARATOR}")
        for issue in issues:
            print(f"  - {issue}")

    unmatched = matching.get('unmatched_labels', [])
    if unmatched:
        print(f"\n{STATUS_INFO} Items needing manual mapping: {', '.join(unmatched)}")

    print(f"\n{STATUS_OK} Written: {target}")
    return 0


def run_init_db(args, logger) -> int:
    """
    Create database tables and seed the default taxonomy.

    Args:
        args: Parsed arguments
        logger: Logger instance

    Returns:
        Exit code (0 for success)
    """
    from database import initialize_database, session_scope, get_connection_info
    from database.operations.taxonomy_ops import TaxonomyOperations

    initialize_database(args.database)
    with session_scope() as session:
        inserted = TaxonomyOperations.seed_default_taxonomy(session)

    info = get_connection_info()
    logger.info(f"Database initialized ({info.get('type')}), {inserted} concepts seeded")
    print(f"\n{STATUS_OK} Database ready: {info.get('url')}")
    print(f"  Taxonomy concepts seeded: {inserted}")
    return 0


def initialize_system() -> tuple[ConfigLoader, DataPathsManager]:
    """
    Initialize doc2xbrl system components.

    Returns:
        Tuple of (ConfigLoader, DataPathsManager)

    Raises:
        ValueError: If a data directory cannot be created
    """
    # Load configuration
    config = ConfigLoader()

    # Set up logging
    setup_ipo_logging(
        log_dir=config.get('log_dir'),
        log_level=config.get('log_level', 'INFO'),
        console_output=config.get('log_console', True),
        max_size_mb=config.get('log_max_size_mb', 10),
        backup_count=config.get('log_backup_count', 5),
    )

    # Create data directories
    paths = DataPathsManager(config)
    result = paths.ensure_all_directories()
    failed = result.get('failed', [])

    if failed:
        print(f"\n{STATUS_FAIL} Could not create data directories:")
        for path, error in failed:
            print(f"  - {path}: {error}")
        raise ValueError("Data directories could not be created")

    return config, paths


def build_parser() -> argparse.ArgumentParser:
    """
    Build the command line parser.

    Returns:
        ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description='doc2xbrl - Financial document to XBRL conversion',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py convert balance.csv                 Convert with defaults
  python main.py convert report.xlsx --currency EUR  Override currency
  python main.py convert data.txt --format csv       Declare the format
  python main.py convert a.csv --store database      Use learned mappings in the database
  python main.py formats                             List supported formats
  python main.py init-db                             Create tables, seed taxonomy
        """
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress banner and verbose output'
    )

    commands = parser.add_subparsers(dest='command', required=True)

    convert = commands.add_parser('convert', help='Convert a document to XBRL')
    convert.add_argument('file', help='Source document')
    convert.add_argument('--format', '-f', help='Format id (default: from file extension)')
    convert.add_argument('--framework', help='Target framework (US-GAAP, IFRS)')
    convert.add_argument('--currency', help='ISO 4217 currency code of monetary facts')
    convert.add_argument('--sector', help='Sector used for learned mappings')
    convert.add_argument('--company', help='Entity registrant name')
    convert.add_argument('--output', '-o', help='Output file (default: output_dir/<name>.xbrl)')
    convert.add_argument(
        '--store',
        choices=[backend.value for backend in StoreBackend],
        help='Where documents, jobs and mappings live (default: config store_backend)'
    )
    convert.add_argument('--database', help='Database URL for --store database')
    convert.add_argument(
        '--no-wait',
        action='store_true',
        help='Retry failed attempts without waiting for the retry delay'
    )

    commands.add_parser('formats', help='List supported input formats')

    init_db = commands.add_parser('init-db', help='Create tables and seed the taxonomy')
    init_db.add_argument('--database', help='Database URL (default: from config)')

    return parser


def main() -> int:
    """
    Main entry point for doc2xbrl.

    Returns:
        Exit code (0 for success, 1 for failure, 130 when interrupted)
    """
    parser = build_parser()
    args = parser.parse_args()

    # Print banner unless quiet mode
    if not args.quiet:
        print_banner()

    try:
        # Initialize system
        config, paths = initialize_system()
        logger = get_input_logger('main')

        if not args.quiet:
            print_system_info(config)

        # Run selected command
        if args.command == 'formats':
            return list_formats(ParserRegistry.default(config.get('default_currency')))

        elif args.command == 'init-db':
            return run_init_db(args, logger)

        else:
            return run_convert(args, config, logger)

    except ValueError as e:
        print(f"\n{STATUS_FAIL} Error: {e}")
        return 1

    except KeyboardInterrupt:
        print("\n[Interrupted]")
        return 130

    except Exception as e:
        print(f"\n{STATUS_FAIL} Unexpected error: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
