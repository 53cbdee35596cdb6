#!/usr/bin/env python3
"""Command-line interface for fileiter.

This module provides the CLI for running scans and resolving files:
- ``scan``: list files matching an entity's filters, one line per file
- ``cat``: write a resolved file (or archive entry) to stdout
- Data-config loading and logging setup

Example:
    >>> from fileiter.cli import parse_arguments
    >>> args = parse_arguments(["scan", "--base-dir", "/data", "--file-name", r"\\.log$"])
"""

import argparse
import shutil
import sys
from typing import Any, Dict, List, Optional, TextIO

import jinja2

from fileiter.core.constants import (
    DEFAULT_DATA_SOURCE,
    DEFAULT_PROCESSOR,
    FILEITER_VERSION,
    ConfigKey,
    DataSourceProperty,
    EntityAttribute,
    RecordKey,
)
from fileiter.core.errors import FileIterError
from fileiter.dataimport.base import Record
from fileiter.dataimport.registry import get_data_source_class, get_processor_class
from fileiter.infrastructure.config_manager import ConfigManager, ConfigSource
from fileiter.infrastructure.context import EntityContext, VariableResolver
from fileiter.infrastructure.logger import Logger, set_global_logger

DESCRIPTION = "fileiter - file discovery and archive-aware file resolution"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If the argument combination is invalid
    """
    parser = argparse.ArgumentParser(
        prog="fileiter",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run every entity of a data-config file
  fileiter scan -c data-config.yaml

  # Ad-hoc scan for logs changed in the last day
  fileiter scan --base-dir /var/log --file-name '\\.log$' --newer-than "'NOW-1DAY'"

  # Render each record through a template
  fileiter scan -c data-config.yaml --template '{{ file }} {{ fileSize }}'

  # Print a file, falling back to the zip next to it
  fileiter cat --base-path /data/exports 2024/report.csv
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {FILEITER_VERSION}",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Data-config file path (YAML format)",
    )

    log_group = parser.add_argument_group("logging options")

    log_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    log_group.add_argument(
        "--log-file",
        metavar="FILE",
        type=str,
        help="Also write log messages to this file",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    scan = commands.add_parser("scan", help="List files matching an entity's filters")
    scan.add_argument("--entity", metavar="NAME", help="Entity to run (default: all)")
    scan.add_argument("--base-dir", metavar="DIR", help="Directory to scan (ad-hoc scan)")
    scan.add_argument("--file-name", metavar="REGEX", help="Pattern file names must contain")
    scan.add_argument("--excludes", metavar="REGEX", help="Pattern of file names to drop")
    scan.add_argument("--recursive", action="store_true", help="Descend into subdirectories")
    scan.add_argument("--newer-than", metavar="DATE", help="Only files modified after DATE")
    scan.add_argument("--older-than", metavar="DATE", help="Only files modified before DATE")
    scan.add_argument("--bigger-than", metavar="BYTES", help="Only files larger than BYTES")
    scan.add_argument("--smaller-than", metavar="BYTES", help="Only files smaller than BYTES")
    scan.add_argument(
        "--template",
        metavar="JINJA",
        help="Jinja2 template rendered once per record",
    )

    cat = commands.add_parser("cat", help="Write a resolved file to stdout")
    cat.add_argument("query", metavar="QUERY", help="Path relative to the base path")
    cat.add_argument("--source", metavar="NAME", help="Data source from the config file")
    cat.add_argument("--base-path", metavar="DIR", help="Base path (ad-hoc data source)")
    cat.add_argument("--encoding", metavar="ENC", help="Character encoding of the file")

    parsed = parser.parse_args(args)

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments namespace

    Raises:
        CLIError: If validation fails
    """
    if args.command == "scan":
        if not args.config and not args.base_dir:
            raise CLIError(
                "Either --config or --base-dir must be specified\n"
                "Use --help for usage information"
            )
        if args.entity and not args.config:
            raise CLIError("--entity requires --config")

    if args.command == "cat" and args.source and not args.config:
        raise CLIError("--source requires --config")


def build_entity_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Build an ad-hoc entity from scan arguments.

    Args:
        args: Parsed arguments namespace

    Returns:
        Entity configuration dictionary
    """
    entity = {
        ConfigKey.ENTITY_NAME: "cli",
        ConfigKey.ENTITY_PROCESSOR: DEFAULT_PROCESSOR,
        EntityAttribute.BASE_DIR: args.base_dir,
        EntityAttribute.FILE_NAME: args.file_name,
        EntityAttribute.EXCLUDES: args.excludes,
        EntityAttribute.RECURSIVE: args.recursive,
        EntityAttribute.NEWER_THAN: args.newer_than,
        EntityAttribute.OLDER_THAN: args.older_than,
        EntityAttribute.BIGGER_THAN: args.bigger_than,
        EntityAttribute.SMALLER_THAN: args.smaller_than,
    }
    return {key: value for key, value in entity.items() if value is not None}


def load_config(args: argparse.Namespace) -> ConfigManager:
    """
    Load the data-config file and command-line overrides.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration manager
    """
    config = ConfigManager(args.config)

    if args.debug:
        config.set(f"{ConfigKey.ROOT}.logging.level", "DEBUG", ConfigSource.CLI_ARGS)
    if args.log_file:
        config.set(f"{ConfigKey.ROOT}.logging.file", args.log_file, ConfigSource.CLI_ARGS)

    return config


def setup_logging(config: ConfigManager) -> Logger:
    """
    Setup logging based on configuration.

    Args:
        config: Configuration manager

    Returns:
        Configured logger instance, also installed as the global logger
    """
    log_level = config.get(f"{ConfigKey.ROOT}.logging.level", "INFO")
    log_file = config.get(f"{ConfigKey.ROOT}.logging.file")

    logger = Logger("fileiter", level=log_level)
    if log_file:
        logger.add_handler(logger.create_file_handler(log_file))

    set_global_logger(logger)
    return logger


def format_record(record: Record, template: Optional[jinja2.Template] = None) -> str:
    """
    Render one record as a line of output.

    Args:
        record: File record
        template: Optional compiled Jinja2 template

    Returns:
        Rendered line (without newline)
    """
    if template is not None:
        return template.render(**record)

    return "\t".join(
        [
            record[RecordKey.ABSOLUTE_FILE],
            str(record[RecordKey.SIZE]),
            record[RecordKey.LAST_MODIFIED].isoformat(),
        ]
    )


def run_scan(
    args: argparse.Namespace, config: ConfigManager, logger: Logger, out: TextIO
) -> int:
    """
    Run the scan command.

    Returns:
        Number of records written
    """
    if args.base_dir:
        entities = [build_entity_from_args(args)]
    elif args.entity:
        entities = [config.get_entity(args.entity)]
    else:
        entities = [
            entity
            for entity in config.get_entities()
            if entity.get(ConfigKey.ENTITY_PROCESSOR, DEFAULT_PROCESSOR) == DEFAULT_PROCESSOR
        ]

    template = None
    if args.template:
        try:
            template = jinja2.Environment().from_string(args.template)
        except jinja2.TemplateError as e:
            raise CLIError(f"Invalid template: {e}") from e

    variables = VariableResolver(config.get_variables())
    count = 0

    for entity in entities:
        name = entity.get(ConfigKey.ENTITY_NAME)
        processor_type = entity.get(ConfigKey.ENTITY_PROCESSOR, DEFAULT_PROCESSOR)
        processor = get_processor_class(processor_type)(logger=logger)

        with logger.add_context(entity=name):
            processor.init(EntityContext(entity, variables, name=name))
            for record in processor:
                out.write(format_record(record, template) + "\n")
                count += 1
            processor.destroy()

    return count


def run_cat(args: argparse.Namespace, config: ConfigManager, logger: Logger, out: TextIO) -> None:
    """Run the cat command."""
    if args.source:
        properties = config.get_data_source(args.source)
    else:
        properties = {DataSourceProperty.BASE_PATH: args.base_path}

    if args.encoding:
        properties[DataSourceProperty.ENCODING] = args.encoding

    source_type = properties.get(ConfigKey.SOURCE_TYPE, DEFAULT_DATA_SOURCE)
    source = get_data_source_class(source_type)(logger=logger)
    variables = VariableResolver(config.get_variables())
    source.init(EntityContext(properties, variables, name=args.source), properties)

    with source:
        with source.get_data(args.query) as stream:
            shutil.copyfileobj(stream, out)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    try:
        args = parse_arguments(argv)
        config = load_config(args)
        logger = setup_logging(config)

        if args.command == "scan":
            count = run_scan(args, config, logger, sys.stdout)
            logger.debug("Scan command complete", records=count)
        else:
            run_cat(args, config, logger, sys.stdout)

        return 0

    except CLIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except FileIterError as e:
        print(f"Error [{e.error_code.name}]: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
