import io
from unittest.mock import MagicMock

import pytest

from api_console.api import ApiCaller
from api_console.app import Application
from api_console.auth import Authenticator
from api_console.cancellation import CancellationToken
from api_console.exceptions import ApiError, AuthenticationError, InvalidArgumentError, OperationCancelled


@pytest.fixture
def auth_service():
    service = MagicMock(spec=Authenticator)
    service.get_access_token.return_value = "test-token"
    return service


@pytest.fixture
def api_service():
    service = MagicMock(spec=ApiCaller)
    service.call_api.return_value = '{\n  "result": "pong"\n}'
    return service


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def application(auth_service, api_service, mock_logger, output):
    return Application(auth_service, api_service, mock_logger, output=output)


class TestConstruction:
    def test_requires_authenticator(self, api_service, mock_logger):
        with pytest.raises(InvalidArgumentError):
            Application(None, api_service, mock_logger)

    def test_requires_api_caller(self, auth_service, mock_logger):
        with pytest.raises(InvalidArgumentError):
            Application(auth_service, None, mock_logger)

    def test_requires_logger(self, auth_service, api_service):
        with pytest.raises(InvalidArgumentError):
            Application(auth_service, api_service, None)


class TestRun:
    def test_successful_run_prints_response(self, application, output):
        application.run()
        assert output.getvalue() == '{\n  "result": "pong"\n}\n'

    def test_token_flows_from_auth_to_api_in_order(self, auth_service, api_service, mock_logger, output):
        calls = []
        auth_service.get_access_token.side_effect = lambda c: calls.append("auth") or "abc"
        api_service.call_api.side_effect = lambda t, c: calls.append(("api", t)) or "ok"

        Application(auth_service, api_service, mock_logger, output=output).run()

        assert calls == ["auth", ("api", "abc")]
        auth_service.get_access_token.assert_called_once()
        api_service.call_api.assert_called_once()

    def test_cancellation_token_threaded_through(self, application, auth_service, api_service):
        token = CancellationToken()
        application.run(token)
        auth_service.get_access_token.assert_called_once_with(token)
        api_service.call_api.assert_called_once_with("test-token", token)

    def test_default_output_is_stdout(self, auth_service, api_service, mock_logger, capsys):
        Application(auth_service, api_service, mock_logger).run()
        assert capsys.readouterr().out == '{\n  "result": "pong"\n}\n'

    def test_runs_are_independent(self, application, auth_service, api_service, output):
        application.run()
        application.run()
        assert auth_service.get_access_token.call_count == 2
        assert api_service.call_api.call_count == 2


class TestFailures:
    def test_authentication_failure_stops_before_api(self, application, auth_service, api_service, mock_logger, output):
        error = AuthenticationError("Failed to authenticate with Azure AD: access_denied")
        auth_service.get_access_token.side_effect = error

        with pytest.raises(AuthenticationError) as exc_info:
            application.run()

        assert exc_info.value is error
        api_service.call_api.assert_not_called()
        mock_logger.exception.assert_called_once()
        assert output.getvalue() == ""

    def test_api_failure_not_retried_and_prints_nothing(self, application, auth_service, api_service, mock_logger, output):
        error = ApiError("API call failed with status code 500")
        api_service.call_api.side_effect = error

        with pytest.raises(ApiError) as exc_info:
            application.run()

        assert exc_info.value is error
        auth_service.get_access_token.assert_called_once()
        mock_logger.exception.assert_called_once()
        assert output.getvalue() == ""

    @pytest.mark.parametrize("step", ["auth", "api"])
    def test_cancellation_surfaces_unwrapped(self, application, auth_service, api_service, output, step):
        target = auth_service.get_access_token if step == "auth" else api_service.call_api
        target.side_effect = OperationCancelled()

        with pytest.raises(OperationCancelled):
            application.run()
        assert output.getvalue() == ""

    def test_invalid_token_propagates(self, application, api_service):
        api_service.call_api.side_effect = InvalidArgumentError("Access token cannot be null or empty")
        with pytest.raises(InvalidArgumentError):
            application.run()
