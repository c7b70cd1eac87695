"""Argument parsing functionality for stubrunner."""

import argparse


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="stubrunner",
        description=(
            "stubrunner - Download contract stubs from an artifact repository and unpack them"
        ),
        add_help=True,
    )

    parser.add_argument("-s", "--stubs",
                        dest="STUBS",
                        help="Stub coordinates, i.e: group:module[:version[:classifier]]",
                        action="store", type=str,
                        required=True)
    parser.add_argument("-r", "--repository",
                        dest="REPOSITORY_ROOT",
                        help="Root URI of the remote stub repository (http(s):// or file://)",
                        action="store",
                        type=str)
    parser.add_argument("--repository-id",
                        dest="REPOSITORY_ID",
                        help="Name under which the repository's metadata is cached",
                        action="store",
                        type=str)

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument("--skip-local",
                            dest="SKIP_LOCAL",
                            help="Bypass the local cache and resolve against the remote repository",
                            action="store_true")
    mode_group.add_argument("--offline",
                            dest="OFFLINE",
                            help="Only look in the local cache",
                            action="store_true")

    parser.add_argument("--local-repository",
                        dest="LOCAL_REPOSITORY",
                        help="Local artifact cache (default: $STUBRUNNER_LOCAL_REPOSITORY or ~/.m2/repository)",
                        action="store",
                        type=str)
    parser.add_argument("--timeout",
                        dest="REQUEST_TIMEOUT",
                        help="Timeout in seconds for each HTTP request",
                        action="store",
                        type=int)
    parser.add_argument("--keep",
                        dest="KEEP",
                        help="Keep the unpacked directory after the program exits",
                        action="store_true")

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
