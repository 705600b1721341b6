"""
Configuration: project-level settings for stream interpretation.

Loading priority:
  1. Project dir .streamedit.yml
  2. Git root .streamedit.yml
  3. Global ~/.streamedit/config.yml

Environment (after .env files are loaded):
  STREAMEDIT_MODEL_ID, STREAMEDIT_VERBOSE
"""

import os
import re
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Callable, Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .tools import ToolCatalog, default_catalog

CONFIG_DIR = Path.home() / ".streamedit"
CONFIG_FILE = CONFIG_DIR / "config.yml"
PROJECT_CONFIG_NAME = ".streamedit.yml"

HTML_UNESCAPE_MODES = {"auto", "always", "off"}
DEFAULT_BACKWARD_PARAMS = ["write_to_file.content"]

_PARAM_REF_RE = re.compile(r"^[A-Za-z_][\w-]*\.[A-Za-z_][\w-]*$")


# ── Configuration metadata and validation ──


@dataclass
class ConfigFieldSpec:
    """Configuration field specification with validation rules."""
    key: str
    field_name: str
    description: str
    value_type: str  # "str", "bool", "list", "map"
    default: Any
    validator: Optional[Callable[[Any], tuple[bool, Any, str]]] = None  # (valid, coerced_value, error_msg)


def _validate_enum(value: Any, valid_values: set) -> tuple[bool, str, str]:
    """Validate value is in allowed set."""
    val_str = str(value).strip().lower()
    if val_str not in valid_values:
        return False, "", f"Must be one of: {', '.join(sorted(valid_values))}"
    return True, val_str, ""


def _validate_bool(value: Any) -> tuple[bool, bool, str]:
    """Validate boolean value."""
    if isinstance(value, bool):
        return True, value, ""
    if isinstance(value, str):
        val_lower = value.strip().lower()
        if val_lower in ("1", "true", "yes", "on"):
            return True, True, ""
        if val_lower in ("0", "false", "no", "off"):
            return True, False, ""
    return False, False, "Must be true/false, yes/no, on/off, or 1/0"


def _validate_html_unescape(value: Any) -> tuple[bool, str, str]:
    """Validate html-unescape mode; YAML reads bare on/off as booleans."""
    if isinstance(value, bool):
        return True, "always" if value else "off", ""
    return _validate_enum(value, HTML_UNESCAPE_MODES)


def _validate_log_file(value: Any) -> tuple[bool, Any, str]:
    """Accept a path, or a bool to use the default location / disable."""
    if value is None:
        return True, "", ""
    if isinstance(value, bool):
        return True, True if value else "", ""
    text = str(value).strip()
    if text.lower() in ("true", "on", "yes"):
        return True, True, ""
    if text.lower() in ("false", "off", "no", "none"):
        return True, "", ""
    return True, text, ""


def _validate_param_list(value: Any) -> tuple[bool, List[str], str]:
    """Validate a list of ``tool.param`` references."""
    if isinstance(value, str):
        raw_values = re.split(r"[\s,]+", value)
    elif isinstance(value, list):
        raw_values = [str(item) for item in value]
    else:
        return False, [], "Must be a list of tool.param entries"

    cleaned = []
    for item in raw_values:
        ref = item.strip()
        if not ref:
            continue
        if not _PARAM_REF_RE.match(ref):
            return False, [], f"Invalid parameter reference '{ref}', expected tool.param"
        if ref not in cleaned:
            cleaned.append(ref)
    return True, cleaned, ""


def _validate_tool_map(value: Any) -> tuple[bool, Dict[str, List[str]], str]:
    """Validate a ``{tool: [param, ...]}`` mapping."""
    if value is None:
        return True, {}, ""
    if not isinstance(value, dict):
        return False, {}, "Must be a mapping of tool name to parameter list"
    tools: Dict[str, List[str]] = {}
    for name, params in value.items():
        if params is None:
            params = []
        if not isinstance(params, list):
            return False, {}, f"Parameters for '{name}' must be a list"
        tools[str(name)] = [str(p) for p in params]
    return True, tools, ""


CONFIG_FIELDS: Dict[str, ConfigFieldSpec] = {
    "verbose": ConfigFieldSpec(
        key="verbose",
        field_name="verbose",
        description="Enable debug logging",
        value_type="bool",
        default=False,
        validator=_validate_bool,
    ),
    "log-file": ConfigFieldSpec(
        key="log-file",
        field_name="log_file",
        description="Log file path (true for ~/.streamedit/logs/streamedit.log, empty to disable)",
        value_type="str",
        default="",
        validator=_validate_log_file,
    ),
    "html-unescape": ConfigFieldSpec(
        key="html-unescape",
        field_name="html_unescape",
        description="Undo HTML entity escaping in edits: auto (by model), always, or off",
        value_type="str",
        default="auto",
        validator=_validate_html_unescape,
    ),
    "model-id": ConfigFieldSpec(
        key="model-id",
        field_name="model_id",
        description="Identifier of the model producing the stream",
        value_type="str",
        default="",
        validator=None,
    ),
    "strip-code-fences": ConfigFieldSpec(
        key="strip-code-fences",
        field_name="strip_code_fences",
        description="Remove markdown fences wrapped around whole-file content",
        value_type="bool",
        default=True,
        validator=_validate_bool,
    ),
    "backward-params": ConfigFieldSpec(
        key="backward-params",
        field_name="backward_params",
        description="Parameters whose closing tag is searched from the end (tool.param)",
        value_type="list",
        default=list(DEFAULT_BACKWARD_PARAMS),
        validator=_validate_param_list,
    ),
    "tools": ConfigFieldSpec(
        key="tools",
        field_name="tools",
        description="Tool catalog override (tool name to parameter names); empty uses built-in tools",
        value_type="map",
        default={},
        validator=_validate_tool_map,
    ),
}


def validate_config_value(key: str, value: Any) -> tuple[bool, Any, str]:
    """
    Validate a configuration value.

    Returns:
        (is_valid, coerced_value, error_message)
    """
    if key not in CONFIG_FIELDS:
        return False, value, f"Unknown configuration key: {key}"

    spec = CONFIG_FIELDS[key]
    if spec.validator:
        return spec.validator(value)

    if spec.value_type == "str":
        return True, "" if value is None else str(value), ""
    elif spec.value_type == "bool":
        return _validate_bool(value)

    return True, value, ""


@dataclass
class Config:
    verbose: bool = False
    log_file: Any = ""
    html_unescape: str = "auto"
    model_id: str = ""
    strip_code_fences: bool = True
    backward_params: List[str] = field(default_factory=lambda: list(DEFAULT_BACKWARD_PARAMS))
    tools: Dict[str, List[str]] = field(default_factory=dict)
    project_root: Optional[str] = None
    _config_source: str = ""

    @classmethod
    def load(cls, project_dir: str = ".") -> "Config":
        config = cls()
        project_path = Path(project_dir).resolve()

        for env_path in [CONFIG_DIR / ".env", project_path / ".env"]:
            if env_path.exists():
                load_dotenv(env_path, override=False)

        git_root = cls._find_git_root(project_path)
        for candidate in [
            project_path / PROJECT_CONFIG_NAME,
            (git_root / PROJECT_CONFIG_NAME) if git_root and git_root != project_path else None,
            CONFIG_FILE,
        ]:
            if candidate and candidate.exists():
                config._load_yaml(candidate)
                config._config_source = str(candidate)
                break

        config._apply_env()
        config.project_root = str(project_path)
        return config

    def _load_yaml(self, filepath: Path):
        try:
            with open(filepath) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(str(filepath), f"cannot read configuration: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(str(filepath), "top level must be a mapping")

        for key, value in data.items():
            if key not in CONFIG_FIELDS:
                continue
            is_valid, coerced, error_msg = validate_config_value(key, value)
            if not is_valid:
                raise ConfigError(key, error_msg)
            setattr(self, CONFIG_FIELDS[key].field_name, coerced)

    def _apply_env(self):
        env_map = {
            "STREAMEDIT_MODEL_ID": "model-id",
            "STREAMEDIT_VERBOSE": "verbose",
        }
        for env_var, key in env_map.items():
            val = os.environ.get(env_var)
            if not val:
                continue
            is_valid, coerced, _ = validate_config_value(key, val)
            if is_valid:
                setattr(self, CONFIG_FIELDS[key].field_name, coerced)

    def save(self, filepath: Optional[str] = None):
        target = Path(filepath) if filepath else (
            Path(self._config_source) if self._config_source else CONFIG_FILE
        )
        target.parent.mkdir(parents=True, exist_ok=True)

        data = {}
        for key, spec in CONFIG_FIELDS.items():
            value = getattr(self, spec.field_name, spec.default)
            if key == "tools" and not value:
                continue
            data[key] = value

        with open(target, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        self._config_source = str(target)

    @property
    def source(self) -> str:
        """File the settings were loaded from or last saved to, if any."""
        return self._config_source

    def should_unescape_html(self) -> bool:
        """Whether edits need HTML entities turned back into characters.

        In ``auto`` mode only non-Claude models get the fix; Claude output
        is taken literally.
        """
        if self.html_unescape == "always":
            return True
        if self.html_unescape == "off":
            return False
        return "claude" not in self.model_id.lower()

    def tool_catalog(self) -> ToolCatalog:
        """Build the tool catalog described by this configuration."""
        tools = self.tools or default_catalog().to_mapping()
        try:
            return ToolCatalog.from_mapping(tools, self.backward_params)
        except ValueError as e:
            raise ConfigError("backward-params", str(e)) from e

    @staticmethod
    def _find_git_root(path: Path) -> Optional[Path]:
        current = path
        while current != current.parent:
            if (current / ".git").exists():
                return current
            current = current.parent
        return None

    def get_config_value(self, key: str) -> Any:
        """Get configuration value by key."""
        if key not in CONFIG_FIELDS:
            return None
        spec = CONFIG_FIELDS[key]
        return getattr(self, spec.field_name, spec.default)

    def set_config_value(self, key: str, value: Any) -> tuple[bool, str]:
        """
        Set configuration value with validation.

        Returns:
            (success, error_message)
        """
        is_valid, coerced_value, error_msg = validate_config_value(key, value)
        if not is_valid:
            return False, error_msg

        spec = CONFIG_FIELDS[key]
        setattr(self, spec.field_name, coerced_value)
        self.save()
        return True, ""

    def reset_config_value(self, key: str) -> tuple[bool, str]:
        """
        Reset configuration value to default.

        Returns:
            (success, error_message)
        """
        if key not in CONFIG_FIELDS:
            return False, f"Unknown configuration key: {key}"

        spec = CONFIG_FIELDS[key]
        default = spec.default
        if isinstance(default, (list, dict)):
            default = type(default)(default)
        setattr(self, spec.field_name, default)
        self.save()
        return True, ""

    def get_config_diff(self) -> Dict[str, Dict[str, Any]]:
        """
        Get configuration differences from defaults.

        Returns:
            Dict with keys: 'modified', 'default'
        """
        result = {"modified": {}, "default": {}}

        for key, spec in CONFIG_FIELDS.items():
            current_value = getattr(self, spec.field_name, spec.default)
            bucket = "default" if current_value == spec.default else "modified"
            result[bucket][key] = {
                "current": current_value,
                "default": spec.default,
                "type": spec.value_type,
                "description": spec.description,
            }

        return result
