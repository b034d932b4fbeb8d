"""Entry point: sign in interactively, call the protected API, print the response.

Execution flow:
 1. Load configuration (tenant, client id, API URL, scopes, redirect URI).
 2. Acquire a delegated access token through MSAL's interactive browser flow.
 3. Call the API with the token as a Bearer credential.
 4. Print the response (pretty-printed when it is JSON).

Exit code 0 on success. Any failure prints `Error: <message>` to stderr and exits 1; details
are available in the log with --verbose.
"""

import argparse
import logging
import sys
from typing import List, Optional

import requests

from api_console.api import ApiCaller
from api_console.app import Application
from api_console.auth import Authenticator
from api_console.cancellation import CancellationToken
from api_console.config import AppSettings
from api_console.exceptions import OperationCancelled, error_kind

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sign in with Azure AD and call a protected API.",
    )
    parser.add_argument("config", nargs="?", default=None, help="Path to config.json")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Cancel sign-in and the API call after this many seconds",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _configure_logging(verbose: bool) -> None:
    # Without --verbose the user only sees the single "Error:" line written by main()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.CRITICAL,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    # MSAL and urllib3 are chatty at debug level
    for name in ("msal", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    cancellation = CancellationToken()
    session: Optional[requests.Session] = None
    try:
        if args.timeout is not None:
            cancellation.cancel_after(args.timeout)
        cfg = AppSettings.load(args.config)
        session = requests.Session()

        authenticator = Authenticator(cfg, logging.getLogger(Authenticator.__module__))
        api_caller = ApiCaller(session, cfg, logging.getLogger(ApiCaller.__module__))
        application = Application(authenticator, api_caller, logging.getLogger(Application.__module__))

        application.run(cancellation)
        return 0
    except KeyboardInterrupt:
        cancellation.cancel()
        print(f"Error: {OperationCancelled().message}", file=sys.stderr)
        return 1
    except Exception as e:
        kind = error_kind(e)
        logger.debug("Run failed (%s)", kind.value if kind else type(e).__name__, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if session is not None:
            session.close()


if __name__ == "__main__":
    raise SystemExit(main())
