"""Sign-in, call, print: the application workflow.

Steps run strictly in order (authenticate -> call API -> print) with no retries. A failure in one
step is logged and re-raised so the entry point decides the exit code; later steps never run.
"""

import logging
import sys
from typing import Optional, TextIO

from .api import ApiCaller
from .auth import Authenticator
from .cancellation import CancellationToken
from .exceptions import ApiError, AuthenticationError, OperationCancelled, require


class Application:
    """Runs authenticate -> call API -> print once per `run()`, keeping no state between runs."""

    def __init__(
        self,
        authenticator: Authenticator,
        api_caller: ApiCaller,
        logger: logging.Logger,
        output: Optional[TextIO] = None,
    ):
        self.authenticator = require(authenticator, "authenticator")
        self.api_caller = require(api_caller, "api_caller")
        self.logger = require(logger, "logger")
        self.output = output

    def run(self, cancellation: Optional[CancellationToken] = None) -> None:
        """Run the workflow once; raises AuthenticationError, ApiError or OperationCancelled."""
        cancellation = cancellation or CancellationToken()
        try:
            # Step 1: authenticate
            access_token = self.authenticator.get_access_token(cancellation)

            # Step 2: call API
            response = self.api_caller.call_api(access_token, cancellation)
        except AuthenticationError:
            self.logger.exception("Authentication failed")
            raise
        except ApiError:
            self.logger.exception("API call failed")
            raise
        except OperationCancelled:
            self.logger.warning("Run cancelled")
            raise

        # Step 3: display result
        out = self.output or sys.stdout
        print(response, file=out)
