"""
Scenario runner for camel checks.

Orchestrates login, command submission and response validation for each
scenario, and reports the outcome.
"""

import logging
from pathlib import Path
import time
from typing import Any

import httpx

from camel_check import config
from camel_check.errors import CamelCheckError, JsonParseFailed, ScenarioConfigError
from camel_check.scenarios import (
    ScenarioConfig,
    ScenarioLoader,
    StepConfig,
    generate_variables,
    substitute_dict_templates,
)
from camel_check.session import CamelSession, get_field
from camel_check.utils.connector import EndpointDirectory
from camel_check.utils.request_formatter import dump_json
from camel_check.validators import ValidationRunner

logger = logging.getLogger(__name__)


class StepFailed(CamelCheckError):
    """Raised when a scenario step does not produce the expected response."""

    def __init__(
        self,
        message: str,
        command: str,
        body: Any = None,
        cause: CamelCheckError | None = None,
    ):
        details = f'command = "{command}"'
        if body is not None:
            details += f', json = "{body}"'
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(f"{message} {{ {details} }}")
        self.command = command
        self.body = body
        self.cause = cause


class ScenarioResult:
    """Result of a single scenario execution."""

    def __init__(
        self,
        name: str,
        success: bool,
        duration: float,
        error: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize scenario result.

        Args:
            name: Name of the scenario, including the connection mode
            success: Whether the scenario passed
            duration: Execution time in seconds
            error: Error message if the scenario failed
            details: Additional details
        """
        self.name = name
        self.success = success
        self.duration = duration
        self.error = error
        self.details = details or {}

    def __str__(self) -> str:
        """String representation of scenario result."""
        status = "PASS" if self.success else "FAIL"
        return f"[{status}] {self.name} ({self.duration:.2f}s)"


class CommandRunner:
    """Runs camel scenarios against one server endpoint."""

    def __init__(
        self,
        secure: bool = False,
        directory: EndpointDirectory | None = None,
        timeout: float | None = None,
        verbose: bool = False,
    ):
        """Initialize the runner.

        Args:
            secure: Use the TLS endpoint
            directory: Endpoints to choose from; defaults to the configured ones
            timeout: Connect timeout in seconds
            verbose: Log every command and validation
        """
        self.secure = secure
        self.directory = directory if directory is not None else EndpointDirectory.from_config()
        self.timeout = timeout
        self.verbose = verbose

        self.mode = "TLS" if secure else "TCP"
        self.loader = ScenarioLoader()
        self.validation_runner = ValidationRunner()

    @property
    def base_url(self) -> str | None:
        """URL of the camel endpoint, or None when there is no endpoint."""
        endpoint = self.directory.get_by_protocol(config.HTTP_PROTOCOL, self.secure)
        if endpoint is None:
            return None
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{endpoint.host}:{endpoint.port}{config.CAMEL_PATH}"

    def wait_for_server(self, timeout: float | None = None) -> bool:
        """Wait until the endpoint answers HTTP requests.

        Any HTTP response counts, including error statuses.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            True if the server answered, False on timeout or without endpoint
        """
        url = self.base_url
        if url is None:
            logger.error("No %s endpoint configured", self.mode)
            return False

        timeout = config.TIMEOUT_CONSTANTS["server_wait"] if timeout is None else timeout
        interval = config.TIMEOUT_CONSTANTS["probe_interval"]
        logger.info("Waiting for %s", url)

        deadline = time.time() + timeout
        with httpx.Client(
            verify=config.CAMEL_TLS_VERIFY, timeout=interval * 5, trust_env=False
        ) as client:
            while True:
                try:
                    response = client.get(url)
                    logger.info("Server is ready (HTTP %d)", response.status_code)
                    return True
                except httpx.TransportError as e:
                    logger.debug("Server not ready: %s", e)

                if time.time() + interval > deadline:
                    return False
                time.sleep(interval)

    def run_scenario(self, scenario: ScenarioConfig) -> ScenarioResult:
        """Run one scenario on fresh connections.

        Args:
            scenario: Scenario to run

        Returns:
            Scenario result; failures are reported, never raised
        """
        name = f"{scenario.name} ({self.mode})"
        logger.info("Running scenario: %s", name)

        start_time = time.time()
        session = CamelSession(self.secure, self.directory, self.timeout)
        variables = generate_variables(scenario)
        completed = 0

        try:
            try:
                session.login(scenario.login_id, scenario.username, scenario.password)
            except CamelCheckError as e:
                raise StepFailed(
                    "Failed to return a successful response after auth request",
                    command="auth",
                    cause=e,
                ) from e

            for i, step in enumerate(scenario.steps):
                if self.verbose:
                    logger.info(
                        "  Command %d/%d: %s", i + 1, len(scenario.steps), step.command.method
                    )
                self._run_step(session, step, variables)
                completed += 1

        except CamelCheckError as e:
            duration = time.time() - start_time
            logger.error("Scenario %s failed: %s", name, e)
            return ScenarioResult(name, False, duration, str(e), {"completed_steps": completed})

        duration = time.time() - start_time
        return ScenarioResult(name, True, duration, details={"completed_steps": completed})

    def _run_step(self, session: CamelSession, step: StepConfig, variables: dict[str, Any]) -> None:
        """Submit one command, validate the response and capture variables.

        Raises:
            StepFailed: If the exchange or any expectation fails
        """
        command = dump_json(substitute_dict_templates(step.command.to_request(), variables))

        try:
            document = session.submit(command, keep_alive=step.keep_alive)
        except JsonParseFailed as e:
            raise StepFailed("Failed parsing the returned JSON", command, e.body, e) from e
        except CamelCheckError as e:
            raise StepFailed("Failed to return a successful HTTP response", command, cause=e) from e

        validations = [
            {
                "type": expectation.type,
                "path": substitute_dict_templates(expectation.path, variables),
                "expected": substitute_dict_templates(expectation.expected, variables),
            }
            for expectation in step.expect
        ]
        results = self.validation_runner.run_all_validations(document, validations)
        if self.verbose:
            for result in results:
                logger.info("    %s", result)

        failed = next((result for result in results if not result), None)
        if failed is not None:
            raise StepFailed(
                f"Unexpected JSON response ({failed.message})",
                command,
                dump_json(document),
                failed.error,
            )

        for name, capture_path in step.capture.items():
            path = substitute_dict_templates(capture_path, variables)
            try:
                variables[name] = get_field(document, path)
            except CamelCheckError as e:
                raise StepFailed("Failed capturing a value", command, dump_json(document), e) from e

    def run_scenarios(self, scenarios: list[ScenarioConfig]) -> list[ScenarioResult]:
        """Run scenarios one after another; a failure does not stop the rest."""
        results = []
        for scenario in scenarios:
            if scenario.skip:
                logger.info("Skipping scenario: %s", scenario.name)
                continue
            results.append(self.run_scenario(scenario))
        return results

    def run_configs(self, config_paths: list[str | Path]) -> list[ScenarioResult]:
        """Load scenarios from files or directories and run them.

        Args:
            config_paths: Scenario files or directories of scenario files

        Returns:
            List of scenario results
        """
        self.loader = ScenarioLoader()
        for config_path in config_paths:
            path = Path(config_path)
            if path.is_file():
                try:
                    self.loader.load_config_file(path)
                except ScenarioConfigError as e:
                    logger.error("Failed to load %s: %s", path, e)
            elif path.is_dir():
                self.loader.load_config_directory(path)
            else:
                logger.warning("Path not found: %s", config_path)

        scenarios = [self.loader.get_config(name) for name in self.loader.list_loaded_configs()]
        for scenario in scenarios:
            for issue in self.loader.validate_config(scenario):
                logger.warning("Scenario %s: %s", scenario.name, issue)

        return self.run_scenarios(scenarios)


def print_summary(results: list[ScenarioResult]) -> int:
    """Print scenario results and return the process exit code.

    Args:
        results: List of scenario results

    Returns:
        0 if every scenario passed, 1 otherwise
    """
    if not results:
        print("No scenarios were run.")
        return 1

    passed = sum(1 for r in results if r.success)
    failed = len(results) - passed
    total_duration = sum(r.duration for r in results)

    print("\n" + "=" * 60)
    print("CAMEL CHECK RESULTS")
    print("=" * 60)

    for result in results:
        print(result)
        if not result.success and result.error:
            print(f"    Error: {result.error}")

    print(f"\nTotal: {len(results)} scenarios")
    print(f"Passed: {passed}")
    print(f"Failed: {failed}")
    print(f"Duration: {total_duration:.2f}s")

    if failed > 0:
        print(f"\n{failed} scenario(s) failed!")
        return 1

    print("\nAll scenarios passed!")
    return 0
