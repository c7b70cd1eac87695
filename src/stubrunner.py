"""stubrunner - fetch contract stubs and unpack them.

    Returns:
        int: Exit code
"""
import logging
import sys

from archive.extractor import ArchiveExtractor, CorruptArchiveError
from args import parse_args
from cli_config import apply_config_overrides, load_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes, Constants
from stub_downloader import StubRetrievalFacade
from versioning.models import RepositorySpec
from versioning.parser import parse_coordinates

logger = logging.getLogger(__name__)


def _setup_logging(args) -> None:
    configure_logging(getattr(args, "LOG_LEVEL", None))
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def main(argv=None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)
    apply_config_overrides(args, load_config(getattr(args, "CONFIG", None)))

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        coordinates = parse_coordinates(args.STUBS)
    except ValueError as exc:
        logger.error("%s", exc)
        return ExitCodes.USAGE_ERROR.value

    if not args.REPOSITORY_ROOT and not args.OFFLINE:
        logger.error("A repository root is required unless --offline is given.")
        return ExitCodes.USAGE_ERROR.value

    facade = StubRetrievalFacade(
        extractor=ArchiveExtractor(cleanup_on_process_exit=not args.KEEP),
        local_repository=args.LOCAL_REPOSITORY,
        repository_id=args.REPOSITORY_ID,
        offline=args.OFFLINE,
    )
    spec = RepositorySpec(root=args.REPOSITORY_ROOT or "", skip_local_cache=args.SKIP_LOCAL)

    try:
        bundle = facade.retrieve_coordinates(spec, coordinates)
    except CorruptArchiveError as exc:
        logger.error("%s", exc)
        return ExitCodes.FILE_ERROR.value

    if bundle is None:
        return ExitCodes.NOT_FOUND.value

    print(bundle.directory)
    return ExitCodes.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
