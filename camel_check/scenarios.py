"""
Scenario fixture parser for camel checks.

Handles the JSON scenario format with template substitution and validation.
"""

import json
import logging
from pathlib import Path
import re
import secrets
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from camel_check import config
from camel_check.errors import ScenarioConfigError

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


class VariableConfig(BaseModel):
    """A value generated once per scenario run."""

    length: int = Field(default=config.RANDOM_LENGTH, gt=0, description="Length of the random string")
    alphabet: str = Field(
        default=config.RANDOM_ALPHABET, min_length=1, description="Characters to draw from"
    )
    value: Any = Field(None, description="Fixed value; disables random generation")


class CommandConfig(BaseModel):
    """A single JSON-RPC command."""

    id: int = Field(..., description="JSON-RPC request id")
    method: str = Field(..., description="JSON-RPC method name")
    params: Any = Field(None, description="Parameters template; omitted when null")

    def to_request(self) -> dict[str, Any]:
        """Build the JSON-RPC request object."""
        request: dict[str, Any] = {"id": self.id, "method": self.method}
        if self.params is not None:
            request["params"] = self.params
        return request


class ExpectationConfig(BaseModel):
    """A predicate over the decoded response."""

    type: str = Field(default="equals", description="Type of validation to perform")
    path: list[str | int] = Field(..., description="Key path into the response")
    expected: Any = Field(None, description="Expected value or JSON type name")


class StepConfig(BaseModel):
    """One command and what its response must look like."""

    command: CommandConfig
    expect: list[ExpectationConfig] = Field(default_factory=list)
    capture: dict[str, list[str | int]] = Field(
        default_factory=dict, description="Variables to read from the response"
    )
    keep_alive: bool = Field(default=True, description="Send Connection: keep-alive")


class ScenarioConfig(BaseModel):
    """Complete scenario configuration."""

    name: str = Field(..., description="Unique name for the scenario")
    description: str = Field(default="", description="Human-readable scenario description")
    username: str = Field(default=config.DEFAULT_CREDENTIALS["username"])
    password: str = Field(default=config.DEFAULT_CREDENTIALS["password"])
    login_id: int = Field(default=1, description="JSON-RPC id of the auth call")
    variables: dict[str, VariableConfig] = Field(default_factory=dict)
    steps: list[StepConfig] = Field(default_factory=list)
    skip: bool = Field(default=False, description="Load but do not run")


class ScenarioLoader:
    """Loads and validates scenario configurations from JSON files."""

    def __init__(self):
        """Initialize scenario loader."""
        self.loaded_configs: dict[str, ScenarioConfig] = {}

    def load_config_file(self, config_path: str | Path) -> ScenarioConfig:
        """Load a scenario from a JSON file.

        Args:
            config_path: Path to JSON scenario file

        Returns:
            Parsed and validated scenario

        Raises:
            ScenarioConfigError: If the file is missing, not JSON, or invalid
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ScenarioConfigError("Scenario file not found", str(config_path))

        try:
            with config_path.open("r", encoding="utf-8") as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ScenarioConfigError(
                f"Invalid JSON at line {e.lineno}: {e.msg}", str(config_path)
            ) from e
        except UnicodeDecodeError as e:
            raise ScenarioConfigError(f"Scenario file is not UTF-8: {e}", str(config_path)) from e
        except OSError as e:
            raise ScenarioConfigError(f"Cannot read scenario file: {e}", str(config_path)) from e

        try:
            scenario = ScenarioConfig.model_validate(config_data)
        except ValidationError as e:
            raise ScenarioConfigError(f"Invalid scenario: {e}", str(config_path)) from e

        self.loaded_configs[scenario.name] = scenario
        return scenario

    def load_config_directory(self, config_dir: str | Path) -> dict[str, ScenarioConfig]:
        """Load every ``*.json`` scenario in a directory.

        Files that fail to load are logged and skipped.

        Raises:
            ScenarioConfigError: If the directory doesn't exist
        """
        config_dir = Path(config_dir)

        if not config_dir.is_dir():
            raise ScenarioConfigError("Scenario directory not found", str(config_dir))

        configs = {}
        for config_file in sorted(config_dir.glob("*.json")):
            try:
                scenario = self.load_config_file(config_file)
                configs[scenario.name] = scenario
            except ScenarioConfigError as e:
                logger.warning("Failed to load %s: %s", config_file, e)

        return configs

    def validate_config(self, scenario: ScenarioConfig) -> list[str]:
        """Check a scenario for common mistakes.

        Args:
            scenario: Scenario to check

        Returns:
            List of warnings; empty when nothing looks wrong
        """
        issues = []

        ids = [scenario.login_id] + [step.command.id for step in scenario.steps]
        if len(ids) != len(set(ids)):
            issues.append("Duplicate JSON-RPC ids detected")

        known = set(scenario.variables)
        for step in scenario.steps:
            if not step.expect:
                issues.append(f"Command {step.command.id} ({step.command.method}) has no expectations")

            used = _placeholders(step.model_dump(exclude={"capture"}))
            for name in sorted(used - known):
                issues.append(f"Command {step.command.id} uses undefined variable '{name}'")
            known.update(step.capture)

        return issues

    def get_config(self, name: str) -> ScenarioConfig | None:
        return self.loaded_configs.get(name)

    def list_loaded_configs(self) -> list[str]:
        return list(self.loaded_configs.keys())


def random_string(length: int = config.RANDOM_LENGTH, alphabet: str = config.RANDOM_ALPHABET) -> str:
    """Draw ``length`` characters from ``alphabet``."""
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_variables(scenario: ScenarioConfig) -> dict[str, Any]:
    """Produce this run's values for the scenario's variables."""
    values = {}
    for name, variable in scenario.variables.items():
        if variable.value is not None:
            values[name] = variable.value
        else:
            values[name] = random_string(variable.length, variable.alphabet)
    return values


def substitute_templates(text: str, variables: dict[str, Any]) -> Any:
    """Substitute ``{name}`` placeholders in a string.

    A string that is a single placeholder becomes the variable's value with
    its type intact. Unknown names are left alone.
    """
    whole = PLACEHOLDER.fullmatch(text)
    if whole and whole.group(1) in variables:
        return variables[whole.group(1)]

    def replace(match: re.Match) -> str:
        name = match.group(1)
        return str(variables[name]) if name in variables else match.group(0)

    return PLACEHOLDER.sub(replace, text)


def substitute_dict_templates(data: Any, variables: dict[str, Any]) -> Any:
    """Recursively substitute placeholders in keys and values.

    Args:
        data: Structure containing template variables
        variables: Values by name

    Returns:
        A new structure with variables substituted
    """
    if isinstance(data, dict):
        return {
            str(substitute_templates(key, variables)): substitute_dict_templates(value, variables)
            for key, value in data.items()
        }
    elif isinstance(data, list):
        return [substitute_dict_templates(item, variables) for item in data]
    elif isinstance(data, str):
        return substitute_templates(data, variables)
    else:
        return data


def _placeholders(data: Any) -> set[str]:
    if isinstance(data, dict):
        names = set()
        for key, value in data.items():
            names |= _placeholders(key) | _placeholders(value)
        return names
    if isinstance(data, list):
        return set().union(*(_placeholders(item) for item in data)) if data else set()
    if isinstance(data, str):
        return set(PLACEHOLDER.findall(data))
    return set()
