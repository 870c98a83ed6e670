#!/usr/bin/env python3
"""
Configuration Manager for Slither Digest

Loads and saves the digest settings. The pipeline itself never reads
configuration from the environment; callers build a DigestConfig and pass it in.
"""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict

import yaml
from rich.console import Console


_TRUE_WORDS = {'true', 'yes', 'on', '1'}
_FALSE_WORDS = {'false', 'no', 'off', '0'}


def coerce_setting(value: Any, default: Any) -> Any:
    """Convert a config file value to the type of the field's default.

    Raises ValueError when the value cannot represent that type.
    """
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        word = str(value).strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ValueError(f"expected a boolean, got {value!r}")
    if isinstance(default, float):
        if isinstance(value, bool):
            raise ValueError(f"expected a number, got {value!r}")
        return float(value)
    if isinstance(value, (dict, list)) or value is None:
        raise ValueError(f"expected a string, got {value!r}")
    return str(value)


@dataclass
class DigestConfig:
    """Main configuration for Slither Digest."""

    # Rendering mode: True skips the generator entirely
    deterministic_only: bool = False

    # Candidate generator settings
    generator_provider: str = "ollama"  # ollama, openai
    generator_timeout: float = 120.0    # seconds, applies to the single generator call
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "mistral"
    openai_model: str = "gpt-4o-mini"
    openai_api_key: str = ""

    # Output settings
    reports_dir: str = "./reports"
    report_filename: str = "audit-summary.md"

    # Knowledge base override (empty = bundled SWC registry subset)
    swc_registry_path: str = ""

    def with_overrides(self, **overrides: Any) -> 'DigestConfig':
        """Copy of this config with the non-None overrides applied."""
        values = asdict(self)
        for key, value in overrides.items():
            if value is not None and key in values:
                values[key] = value
        return DigestConfig(**values)


class ConfigManager:
    """Manages Slither Digest configuration."""

    def __init__(self, config_file: str = "~/.slither-digest/config.yaml"):
        self.config_file = Path(config_file).expanduser()
        self.console = Console()
        self.config = DigestConfig()

        self.load_config()

    def load_config(self) -> None:
        """Load configuration from file."""
        if not self.config_file.exists():
            return

        try:
            with open(self.config_file, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            self.console.print(f"[yellow]Warning: Could not load config file: {e}[/yellow]")
            return

        if not isinstance(data, dict):
            return

        defaults = asdict(DigestConfig())
        for key, value in data.items():
            if key not in defaults:
                continue
            try:
                setattr(self.config, key, coerce_setting(value, defaults[key]))
            except (TypeError, ValueError) as e:
                self.console.print(f"[yellow]Warning: Ignoring config value for {key}: {e}[/yellow]")

    def save_config(self) -> None:
        """Save current configuration to file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w') as f:
                yaml.dump(asdict(self.config), f, default_flow_style=False, indent=2)

            self.console.print(f"[green]✓ Configuration saved to {self.config_file}[/green]")

        except OSError as e:
            self.console.print(f"[red]✗ Failed to save config: {e}[/red]")

    def as_dict(self) -> Dict[str, Any]:
        """Configuration with secrets masked, for display."""
        values = asdict(self.config)
        if values.get('openai_api_key'):
            values['openai_api_key'] = values['openai_api_key'][:4] + '…'
        return values
