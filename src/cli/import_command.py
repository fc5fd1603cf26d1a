"""Import command orchestration for CLI.

This module provides the ImportCommand class that wires the import
pipeline together for one CLI invocation: configuration, credentials,
Notion API, plugins, target page selection, progress output, and the
translation of failures into exit codes.
"""

import logging
import os
from typing import Callable, Optional

from src.cli.config import ConfigLoader, ImportConfig
from src.cli.errors import CLIError, ConfigError, ConfigNotFoundError
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.cli.selection import PageSelector
from src.content_converter.markdown_converter import MarkdownConverter
from src.importer.errors import (
    ImporterError,
    NoFilesFoundError,
    NoTargetPageError,
    ReportWriteError,
)
from src.importer.events import CompositeObserver, ImportObserver
from src.importer.file_importer import FileImporter
from src.importer.import_run import ImportRun, TargetSelector
from src.importer.path_cache import PathKeyCache
from src.importer.table_extractor import TableExtractor
from src.importer.table_materializer import TableMaterializer
from src.notion_service.api_wrapper import APIWrapper
from src.notion_service.auth import Authenticator
from src.notion_service.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    NotionaterError,
)
from src.plugins.registry import PluginRegistry, default_registry

logger = logging.getLogger(__name__)

USAGE_EXAMPLE = 'notionater -t <token> -b "Base page" -d ./wiki -g "**/*.md"'


class ImportCommand:
    """Orchestrates one import for the CLI.

    The workflow:
        1. Merge the config file (if any) over the command-line settings
        2. Check the token and glob are present
        3. Load plugins by name
        4. Discover files under the base path
        5. Search for the base page and let the user pick one if several match
        6. Import every file with a progress display
        7. Print the summary and return an exit code

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> cmd = ImportCommand(output_handler=output)
        >>> exit_code = cmd.run(ImportConfig(token="secret_...", glob="**/*.md"))
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        output_handler: Optional[OutputHandler] = None,
        api_factory: Optional[Callable[[ImportConfig], APIWrapper]] = None,
        registry: Optional[PluginRegistry] = None,
        converter: Optional[MarkdownConverter] = None,
        selector: Optional[TargetSelector] = None,
    ):
        """Initialize import command with dependencies.

        Args:
            output_handler: OutputHandler for terminal output (optional)
            api_factory: Builds the APIWrapper from the config (optional)
            registry: Plugin registry (default plugins if None)
            converter: Markdown converter (optional)
            selector: Target page chooser (interactive prompt if None)
        """
        self.output_handler = output_handler or OutputHandler()
        self.api_factory = api_factory or self._default_api
        self.registry = registry or default_registry()
        self.converter = converter or MarkdownConverter()
        self.selector = selector or PageSelector(self.output_handler.console)

    @staticmethod
    def _default_api(config: ImportConfig) -> APIWrapper:
        authenticator = Authenticator(token=config.token)
        # Fail before any remote call when no token is available
        authenticator.get_credentials()
        return APIWrapper(authenticator, timeout_ms=config.timeout_ms)

    def run(self, config: ImportConfig, config_path: Optional[str] = None) -> ExitCode:
        """Execute the import.

        Args:
            config: Settings from the command line
            config_path: Optional config file whose values override config

        Returns:
            ExitCode indicating success or specific failure type
        """
        try:
            if config_path:
                logger.info(f"Loading configuration from {config_path}")
                config = ConfigLoader.apply(config, ConfigLoader.load(config_path))

            if not config.glob:
                self.output_handler.error("No glob provided, use -g to select the files to import")
                self.output_handler.print(f"Example:\n  {USAGE_EXAMPLE}")
                return ExitCode.GENERAL_ERROR

            if not os.path.isdir(config.base_path):
                raise ConfigError(f"Not a directory: {config.base_path}", "base_path")

            try:
                api = self.api_factory(config)
            except InvalidCredentialsError as e:
                self.output_handler.error(f"No Notion token provided: {e}")
                self.output_handler.print(f"Example:\n  {USAGE_EXAMPLE}")
                return ExitCode.GENERAL_ERROR

            events = CompositeObserver([])
            import_run = self._build_run(config, api, events)

            try:
                files = import_run.discover()
            except ValueError as e:
                raise ConfigError(str(e), "glob")
            self.output_handler.info(f"Found {len(files)} file(s) to import")

            self.output_handler.info(f"Searching for '{config.base_page}'...")
            target = import_run.resolve_target(config.base_page, self.selector)
            if target is None:
                # Selection cancelled by the user
                return ExitCode.SUCCESS

            with self.output_handler.import_progress() as progress_observer:
                events.observers.append(progress_observer)
                result = import_run.run(files, target)

            self.output_handler.print_summary(result)

            if result.error_count > 0:
                return ExitCode.IMPORT_ERRORS
            return ExitCode.SUCCESS

        except InvalidCredentialsError as e:
            logger.error(f"Authentication failed: {e}")
            self.output_handler.error(f"Authentication failed: {e}")
            self.output_handler.info(
                "Check the --token option or the NOTION_TOKEN environment variable"
            )
            return ExitCode.AUTH_ERROR

        except (APIUnreachableError, APIAccessError) as e:
            logger.error(f"API error: {e}")
            self.output_handler.error(f"API error: {e}")
            self.output_handler.info("Check your internet connection and try again")
            return ExitCode.NETWORK_ERROR

        except (ConfigError, ConfigNotFoundError) as e:
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(str(e))
            return ExitCode.GENERAL_ERROR

        except (NoFilesFoundError, NoTargetPageError) as e:
            logger.error(str(e))
            self.output_handler.error(str(e))
            return ExitCode.GENERAL_ERROR

        except ReportWriteError as e:
            logger.error(str(e))
            self.output_handler.error(str(e))
            return ExitCode.IMPORT_ERRORS

        except (CLIError, ImporterError, NotionaterError) as e:
            logger.error(f"Import error: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception("Unexpected error during import")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def _build_run(self, config: ImportConfig, api: APIWrapper, observer: ImportObserver) -> ImportRun:
        plugin_options = config.to_plugin_options()
        plugins = self.registry.load(config.plugins, plugin_options)
        if len(plugins):
            self.output_handler.info(f"Plugins: {', '.join(plugins.names)}")

        importer = FileImporter(
            api=api,
            converter=self.converter,
            path_cache=PathKeyCache(api, mode=config.folder_cache),
            base_path=config.base_path,
            plugins=plugins,
            plugin_options=plugin_options,
            extractor=TableExtractor(header_fallback=config.header_fallback),
            materializer=TableMaterializer(api, row_order=config.row_order, observer=observer),
            observer=observer,
            skip_empty=config.skip_empty,
        )
        return ImportRun(
            api=api,
            file_importer=importer,
            base_path=config.base_path,
            pattern=config.glob,
            observer=observer,
            error_report_path=config.error_report_path,
        )
