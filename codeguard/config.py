"""
Configuration support for Codeguard.

Loads settings from .codeguard.yaml (project root) or ~/.codeguard.yaml
(user home), then applies environment variable overrides. Project-level
config takes precedence over user-level config.

Configuration Options:
- endpoint: Chat completions URL of the AI gateway
- model: Model name sent to the gateway
- request_timeout: Seconds to wait for the gateway
- max_code_chars: Largest snippet accepted by the gateway endpoint
- host / port: Address the HTTP server binds to
- verbosity: Log verbosity level (0-2)

The API key is read from the environment only. It is never loaded from
a config file and never written back by to_dict().
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import dotenv
import structlog
import yaml

log = structlog.get_logger("codeguard.config")

CONFIG_NAMES = (".codeguard.yaml", ".codeguard.yml")

DEFAULT_ENDPOINT = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash"

ENV_API_KEY = "AI_GATEWAY_API_KEY"


@dataclass
class CodeguardConfig:
    """Configuration settings for Codeguard.

    Attributes:
        api_key: Bearer credential for the AI gateway (env only)
        endpoint: Chat completions URL
        model: Model name sent with every request
        request_timeout: Seconds before the upstream call is abandoned
        max_code_chars: Maximum accepted snippet length
        host: Server bind address
        port: Server port
        verbosity: Log verbosity 0-2
        log_json: Render logs as JSON lines
    """

    api_key: str | None = None

    # LLM settings
    endpoint: str = DEFAULT_ENDPOINT
    model: str = DEFAULT_MODEL
    request_timeout: float = 120

    # Analysis settings
    max_code_chars: int = 100_000

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Output settings
    verbosity: int = 0
    log_json: bool = False

    def __repr__(self) -> str:
        key = "set" if self.api_key else None
        return (
            f"CodeguardConfig(api_key={key!r}, endpoint={self.endpoint!r}, model={self.model!r}, "
            f"request_timeout={self.request_timeout!r}, max_code_chars={self.max_code_chars!r}, "
            f"host={self.host!r}, port={self.port!r}, verbosity={self.verbosity!r})"
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CodeguardConfig":
        """Create config from dictionary.

        Handles nested 'llm', 'analysis', 'server' sections from YAML.
        An 'api_key' key is ignored; the credential comes from the
        environment.

        Args:
            data: Dictionary from YAML file or other source

        Returns:
            CodeguardConfig instance
        """
        config = cls()

        # Handle flat keys (simple format)
        if "endpoint" in data and data["endpoint"]:
            config.endpoint = str(data["endpoint"])
        if "model" in data and data["model"]:
            config.model = str(data["model"])
        if "request_timeout" in data:
            config.request_timeout = float(data["request_timeout"])
        if "max_code_chars" in data:
            config.max_code_chars = int(data["max_code_chars"])
        if "host" in data and data["host"]:
            config.host = str(data["host"])
        if "port" in data:
            config.port = int(data["port"])
        if "verbosity" in data:
            config.verbosity = int(data["verbosity"])
        if "log_json" in data:
            config.log_json = bool(data["log_json"])

        # Handle nested sections (structured format)
        if "llm" in data and isinstance(data["llm"], dict):
            llm = data["llm"]
            if llm.get("endpoint"):
                config.endpoint = str(llm["endpoint"])
            if llm.get("model"):
                config.model = str(llm["model"])
            if "request_timeout" in llm:
                config.request_timeout = float(llm["request_timeout"])

        if "analysis" in data and isinstance(data["analysis"], dict):
            analysis = data["analysis"]
            if "max_code_chars" in analysis:
                config.max_code_chars = int(analysis["max_code_chars"])

        if "server" in data and isinstance(data["server"], dict):
            server = data["server"]
            if server.get("host"):
                config.host = str(server["host"])
            if "port" in server:
                config.port = int(server["port"])

        if "api_key" in data:
            log.warning("Ignoring api_key in config file; set the environment variable instead", env=ENV_API_KEY)

        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for serialization (without the API key)."""
        return {
            "endpoint": self.endpoint,
            "model": self.model,
            "request_timeout": self.request_timeout,
            "max_code_chars": self.max_code_chars,
            "host": self.host,
            "port": self.port,
            "verbosity": self.verbosity,
            "log_json": self.log_json,
        }

    def apply_env(self, environ: dict[str, str] | None = None) -> "CodeguardConfig":
        """Override settings from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            self, for chaining
        """
        env = os.environ if environ is None else environ

        self.api_key = env.get(ENV_API_KEY) or None
        if env.get("AI_GATEWAY_URL"):
            self.endpoint = env["AI_GATEWAY_URL"]
        if env.get("AI_GATEWAY_MODEL"):
            self.model = env["AI_GATEWAY_MODEL"]
        if env.get("CODEGUARD_REQUEST_TIMEOUT"):
            self.request_timeout = float(env["CODEGUARD_REQUEST_TIMEOUT"])
        if env.get("CODEGUARD_MAX_CODE_CHARS"):
            self.max_code_chars = int(env["CODEGUARD_MAX_CODE_CHARS"])
        if env.get("CODEGUARD_HOST"):
            self.host = env["CODEGUARD_HOST"]
        if env.get("CODEGUARD_PORT"):
            self.port = int(env["CODEGUARD_PORT"])
        return self


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .codeguard.yaml config file.

    Search order:
    1. Current directory / start_dir
    2. Parent directories up to filesystem root
    3. User home directory (~/.codeguard.yaml)

    Args:
        start_dir: Directory to start searching from (default: cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    current = (start_dir or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        for name in CONFIG_NAMES:
            path = directory / name
            if path.exists():
                return path

    home = Path.home()
    for name in CONFIG_NAMES:
        home_path = home / name
        if home_path.exists():
            return home_path

    return None


def load_config(
    config_path: Path | None = None,
    start_dir: Path | None = None,
    environ: dict[str, str] | None = None,
) -> CodeguardConfig:
    """Load configuration from YAML file and the environment.

    If config_path is not provided, searches for .codeguard.yaml in the
    current directory, parent directories, and user home. A .env file is
    loaded into the process environment first.

    Args:
        config_path: Explicit path to config file (optional)
        start_dir: Directory to start searching from (optional)
        environ: Environment mapping used for overrides (default: os.environ)

    Returns:
        CodeguardConfig instance (default values if no config found)
    """
    if environ is None:
        dotenv.load_dotenv()

    path = config_path or find_config_file(start_dir)

    if not path or not path.exists():
        log.debug("No config file found, using defaults")
        return CodeguardConfig().apply_env(environ)

    log.info("Loading config", path=str(path))

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        log.error("Failed to parse config file", path=str(path), error=str(e))
        return CodeguardConfig().apply_env(environ)

    if not isinstance(data, dict):
        log.warning("Config file is empty", path=str(path))
        return CodeguardConfig().apply_env(environ)

    config = CodeguardConfig.from_dict(data).apply_env(environ)
    log.debug("Config loaded", endpoint=config.endpoint, model=config.model)
    return config


def create_example_config(output_path: Path | None = None) -> str:
    """Generate example config file content.

    Args:
        output_path: If provided, writes example to this path

    Returns:
        Example YAML config as string
    """
    example = f"""# Codeguard Configuration File
# Place this file as .codeguard.yaml in your project root or home directory.
# The API key is read from the {ENV_API_KEY} environment variable only.

# LLM Settings
llm:
  # OpenAI-compatible chat completions endpoint
  endpoint: {DEFAULT_ENDPOINT}

  # Model name sent with every request
  model: {DEFAULT_MODEL}

  # Seconds to wait for the gateway before giving up
  request_timeout: 120

# Analysis Settings
analysis:
  # Largest snippet accepted, in characters
  max_code_chars: 100000

# Server Settings
server:
  host: 0.0.0.0
  port: 8000

# Output Settings
verbosity: 0  # 0=warnings, 1=info, 2=debug
log_json: false
"""

    if output_path:
        output_path.write_text(example, encoding="utf-8")
        log.info("Example config written", path=str(output_path))

    return example
