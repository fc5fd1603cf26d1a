"""Main CLI entry point for the notionater command.

This module provides the Typer application that serves as the entry point
for the notionater command-line tool. It uses options on the main command
rather than subcommands for a simpler user experience.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer

from src.cli.config import ImportConfig, parse_enum
from src.cli.errors import ConfigError
from src.cli.import_command import ImportCommand
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.importer.error_report import DEFAULT_REPORT_PATH
from src.importer.models import FolderCacheMode, HeaderFallback, RowOrder
from src.notion_service.api_wrapper import DEFAULT_TIMEOUT_MS
from src.plugins.registry import parse_plugin_names

__version__ = "0.1.0"

app = typer.Typer(
    name="notionater",
    help="""Import a directory of Markdown files into Notion.

Every directory becomes a folder page, every file becomes a page, and
every Markdown table becomes a database linked from its page.

EXAMPLE:
  notionater -t secret_xxx -b "Engineering" -d ./wiki -g "**/*.md"

Quote the glob so your shell does not expand it.""",
    add_completion=False,
    rich_markup_mode=None,  # Disable Rich markup to avoid compatibility issues
    no_args_is_help=False,
)

# Module logger
logger = logging.getLogger(__name__)


LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}

# Loggers of the HTTP stack; they only get through at debug verbosity
LIBRARY_LOGGERS = ("notion_client", "httpx", "httpcore")


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Set up the 'src' logger for the requested verbosity.

    Verbosity 0 logs warnings, 1 adds info and 2 or more adds debug. Records
    go to stderr and, when logdir is given, to a timestamped file in it.
    The root logger is never touched.
    """
    level = LOG_LEVELS.get(verbosity, logging.DEBUG)

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt="%H:%M:%S")
    )
    handlers: List[logging.Handler] = [stderr_handler]

    log_file = None
    if logdir:
        Path(logdir).mkdir(parents=True, exist_ok=True)
        log_file = Path(logdir) / f"notionater_{datetime.now():%Y%m%d_%H%M%S}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s")
        )
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        app_logger.addHandler(handler)

    library_level = logging.DEBUG if level == logging.DEBUG else logging.ERROR
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    if log_file:
        logger.info(f"Writing log to {log_file}")


@app.command()
def main_command(
    token: Optional[str] = typer.Option(
        None,
        "--token",
        "-t",
        help="Notion integration token (https://www.notion.so/my-integrations); defaults to NOTION_TOKEN",
    ),
    base_page: str = typer.Option(
        "",
        "--base-page",
        "--basePage",
        "-b",
        help="Title search for the page to import under",
    ),
    base_path: Optional[str] = typer.Option(
        None,
        "--base-path",
        "--basePath",
        "-d",
        help="Directory the glob and local images are relative to (default: current directory)",
    ),
    glob: Optional[str] = typer.Option(
        None,
        "--glob",
        "-g",
        help="Glob selecting the files to import, relative to the base path",
    ),
    plugins: str = typer.Option(
        "none",
        "--plugins",
        "-p",
        help="Comma separated plugins to run: devops, devops-users, docusaurus",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML or JSON config file; its values override command-line options",
    ),
    skip_empty: bool = typer.Option(
        False,
        "--skip-empty",
        "--skipEmpty",
        "-s",
        help="Also skip files that contain only whitespace",
    ),
    azure_blob_url: Optional[str] = typer.Option(
        None,
        "--azure-blob-url",
        "--azureBlobUrl",
        help="Public URL prefix of the blob container local images are uploaded to",
    ),
    azure_blob_account: Optional[str] = typer.Option(
        None,
        "--azure-blob-account",
        "--azureBlobAccount",
        help="Azure storage account for image uploads",
    ),
    images: Optional[str] = typer.Option(
        None,
        "--images",
        help="Directory local image paths are resolved against (default: base path)",
    ),
    row_order: str = typer.Option(
        RowOrder.FORWARD.value,
        "--row-order",
        help="Database row creation order: forward or reverse",
    ),
    folder_cache: str = typer.Option(
        FolderCacheMode.SEGMENT.value,
        "--folder-cache",
        help=(
            "Folder page reuse: 'segment' reuses one page per folder name, so "
            "a/images and b/images share a page; 'path' keeps them apart"
        ),
    ),
    header_fallback: str = typer.Option(
        HeaderFallback.COLUMN.value,
        "--header-fallback",
        help="Name for empty table header cells: column ('Column') or indexed ('Header 2')",
    ),
    timeout: int = typer.Option(
        DEFAULT_TIMEOUT_MS,
        "--timeout",
        help="Per-request Notion API timeout in milliseconds",
    ),
    error_report: str = typer.Option(
        DEFAULT_REPORT_PATH,
        "--error-report",
        help="Where to write the error report when files fail",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Import a directory of Markdown files into Notion.

    \b
    EXAMPLES:
      notionater -b "Engineering" -g "**/*.md"
      notionater -b "Wiki" -d ./wiki -g "**/*.md" -p devops --images ./wiki/.attachments
      notionater -c import.yaml

    \b
    EXIT CODES:
      0  all files imported or skipped
      1  usage, configuration or unexpected error
      2  at least one file failed (see the error report)
      3  authentication failure
      4  Notion API unreachable
    """
    if version:
        typer.echo(f"notionater version {__version__}")
        raise typer.Exit()

    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    try:
        import_config = ImportConfig(
            token=token,
            base_page=base_page,
            glob=glob,
            plugins=parse_plugin_names(plugins),
            skip_empty=skip_empty,
            azure_blob_url=azure_blob_url,
            azure_blob_account=azure_blob_account,
            images=images,
            row_order=parse_enum(RowOrder, row_order, "row_order"),
            folder_cache=parse_enum(FolderCacheMode, folder_cache, "folder_cache"),
            header_fallback=parse_enum(HeaderFallback, header_fallback, "header_fallback"),
            timeout_ms=timeout,
            error_report_path=error_report,
        )
        if base_path:
            import_config.base_path = base_path
    except ConfigError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    import_cmd = ImportCommand(output_handler=output)
    exit_code = import_cmd.run(import_config, config_path=config)

    raise typer.Exit(exit_code)


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
