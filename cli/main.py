"""
Main CLI implementation for Slither Digest.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from digest.candidate_generators import create_candidate_generator
from digest.config_manager import ConfigManager, DigestConfig
from digest.normalizer import load_slither_report
from digest.pipeline import AuditReportPipeline, PipelineResult
from digest.report_store import ReportStore


class DigestCLI:
    """Main CLI class for Slither Digest."""

    def __init__(self, config_manager: Optional[ConfigManager] = None, console: Optional[Console] = None):
        self.version = "1.0.0"
        self.config_manager = config_manager or ConfigManager()
        self.console = console or Console()

    def show_version(self):
        """Display version information."""
        self.console.print(f"Slither Digest v{self.version}")

    def _get_openai_api_key(self) -> str:
        """Get OpenAI API key from config or environment."""
        return self.config_manager.config.openai_api_key or os.getenv('OPENAI_API_KEY', '')

    def build_config(
        self,
        deterministic: bool = False,
        provider: Optional[str] = None,
        timeout: Optional[float] = None,
        output_dir: Optional[str] = None,
    ) -> DigestConfig:
        """Effective config for one invocation: file settings plus CLI flags."""
        return self.config_manager.config.with_overrides(
            deterministic_only=True if deterministic else None,
            generator_provider=provider,
            generator_timeout=timeout,
            reports_dir=output_dir,
            openai_api_key=self._get_openai_api_key() or None,
        )

    def run_report(
        self,
        report_path: str,
        subject: str,
        deterministic: bool = False,
        provider: Optional[str] = None,
        timeout: Optional[float] = None,
        output_dir: Optional[str] = None,
        print_report: bool = False,
    ) -> int:
        """Digest a Slither JSON report into a Markdown summary."""
        path = Path(report_path)
        if not path.exists():
            self.console.print(f"[red]✗ Report file not found: {path}[/red]")
            return 1

        try:
            raw_findings = load_slither_report(path)
        except (OSError, ValueError) as e:
            self.console.print(f"[red]✗ Could not read Slither report: {escape(str(e))}[/red]")
            return 1

        config = self.build_config(deterministic, provider, timeout, output_dir)
        generator = None if config.deterministic_only else create_candidate_generator(config)
        try:
            pipeline = AuditReportPipeline(
                config=config,
                generator=generator,
                store=ReportStore(config.reports_dir, config.report_filename),
            )
        except (OSError, ValueError, yaml.YAMLError) as e:
            self.console.print(f"[red]✗ Could not load SWC registry: {escape(str(e))}[/red]")
            return 1

        self.console.print(f"📝 Summarizing {len(raw_findings)} Slither findings for {subject}...")
        result = pipeline.run(subject, raw_findings)
        self._print_summary(result)

        if print_report:
            self.console.print(result.markdown, markup=False, highlight=False)
        return 0

    def _print_summary(self, result: PipelineResult) -> None:
        if result.used_generator_output:
            self.console.print("[green]✓ Generated summary passed validation[/green]")
        else:
            note = f" ({escape(result.fallback_reason)})" if result.fallback_reason else ""
            self.console.print(f"[yellow]Using deterministic report{note}[/yellow]")
            if result.validation and result.validation.issues:
                for issue in result.validation.issues:
                    self.console.print(f"  [dim]- {escape(issue)}[/dim]")

        merged = result.stats.get('findings_merged', 0)
        if merged:
            self.console.print(f"Grouped {merged} repeated findings")
        if result.report_path:
            self.console.print(f"[green]✅ Audit complete: {result.report_path}[/green]")

    def show_config(self) -> int:
        table = Table(title="Slither Digest Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        for key, value in self.config_manager.as_dict().items():
            table.add_row(key, str(value))
        self.console.print(table)
        return 0
