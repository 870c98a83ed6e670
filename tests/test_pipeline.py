"""
End-to-end tests for the Slither digest pipeline.
"""

import asyncio
import logging
import time

import pytest

from digest.check_catalog import CHECK_GUIDANCE, EXTERNAL_CALL_WRITE_SENTENCE
from digest.config_manager import DigestConfig
from digest.models import Severity
from digest.pipeline import SOURCE_DETERMINISTIC, SOURCE_GENERATED, AuditReportPipeline
from digest.report_generator import ReportGenerator, no_issues_message
from digest.report_store import ReportStore
from digest.report_validator import count_subheadings

from conftest import (
    REENTRANCY_DESCRIPTION,
    ZERO_CHECK_DESCRIPTION,
    CannedGenerator,
    make_raw,
)


HIGH_MEDIUM_ONLY = """# High Severity

## Controlled Delegatecall
Delegatecall into caller-controlled code.

# Medium Severity

## Unchecked Token Transfer
Transfer result ignored.
"""


def scenario_d_findings():
    return [
        make_raw(check='controlled-delegatecall', impact='High'),
        make_raw(check='unchecked-transfer', impact='Medium', description='Vault.pay() ignores return value'),
        make_raw(check='missing-zero-check', impact='Low', description=ZERO_CHECK_DESCRIPTION,
                 locations=(('contracts/Vault.sol', 30, 'newOwner'),)),
    ]


class TestScenarios:
    """Reference scenarios"""

    def test_scenario_a_delegatecall_two_lines(self, deterministic_config, enricher):
        raw = [make_raw(locations=(('contracts/Proxy.sol', 8, 'forward'), ('contracts/Proxy.sol', 9, 'forward')))]
        result = AuditReportPipeline(deterministic_config, enricher=enricher).run("0xABC", raw)

        report = result.markdown
        risk, remediation = CHECK_GUIDANCE['controlled-delegatecall']
        assert result.source == SOURCE_DETERMINISTIC
        assert report.count("# High Severity") == 1
        assert report.count("## Controlled Delegatecall") == 1
        assert count_subheadings(report) == {
            Severity.HIGH: 1, Severity.MEDIUM: 0, Severity.LOW: 0, Severity.INFORMATIONAL: 0,
        }
        assert "  - `forward` (line 8)" in report
        assert "  - `forward` (line 9)" in report
        assert risk in report
        assert remediation in report

    def test_scenario_b_no_findings(self, deterministic_config, enricher):
        result = AuditReportPipeline(deterministic_config, enricher=enricher).run("0xABC", [])
        assert result.markdown == no_issues_message("0xABC")
        assert "0xABC" in result.markdown

    def test_scenario_c_grouped_zero_checks(self, deterministic_config, enricher):
        raw = [
            make_raw(check='missing-zero-check', impact='Low', description=ZERO_CHECK_DESCRIPTION,
                     locations=(('contracts/Vault.sol', line, 'newOwner'),))
            for line in (30, 41, 52)
        ]
        result = AuditReportPipeline(deterministic_config, enricher=enricher).run("0xABC", raw)

        assert len(result.findings) == 1
        assert [loc.line for loc in result.findings[0].locations] == [30, 41, 52]
        assert result.stats['findings_merged'] == 2
        assert result.markdown.count("## Missing Zero-Address Validation") == 1

    def test_scenario_d_missing_low_section_falls_back(self, generator_config, enricher):
        generator = CannedGenerator(HIGH_MEDIUM_ONLY)
        pipeline = AuditReportPipeline(generator_config, generator=generator, enricher=enricher)
        result = pipeline.run("0xABC", scenario_d_findings())

        expected = ReportGenerator().generate_markdown_report("0xABC", pipeline.prepare_findings(scenario_d_findings()))
        assert result.source == SOURCE_DETERMINISTIC
        assert result.validation.accepted is False
        assert result.markdown == expected
        assert len(generator.prompts) == 1


class TestGeneratorPath:
    """Generated report acceptance and fallback"""

    def test_accepts_valid_candidate(self, generator_config, enricher):
        candidate = HIGH_MEDIUM_ONLY + "\n# Low Severity\n\n## Missing Zero-Address Validation\nCheck newOwner.\n"
        generator = CannedGenerator(candidate)
        result = AuditReportPipeline(generator_config, generator=generator, enricher=enricher).run(
            "0xABC", scenario_d_findings())

        assert result.source == SOURCE_GENERATED
        assert result.used_generator_output is True
        assert result.markdown == candidate

    def test_rejects_candidate_missing_sentence(self, generator_config, enricher):
        raw = [make_raw(check='reentrancy-eth', description=REENTRANCY_DESCRIPTION)]
        candidate = "# High Severity\n\n## Reentrancy (ETH Transfer)\nBad ordering.\n"
        result = AuditReportPipeline(generator_config, generator=CannedGenerator(candidate), enricher=enricher).run(
            "0xABC", raw)

        assert result.source == SOURCE_DETERMINISTIC
        assert EXTERNAL_CALL_WRITE_SENTENCE in result.markdown

    def test_generator_failure_falls_back(self, generator_config, enricher, failing_generator):
        result = AuditReportPipeline(generator_config, generator=failing_generator, enricher=enricher).run(
            "0xABC", scenario_d_findings())
        assert result.source == SOURCE_DETERMINISTIC
        assert "connection refused" in result.fallback_reason
        assert result.validation is None

    def test_fallback_log_names_generator(self, generator_config, enricher, failing_generator, caplog):
        with caplog.at_level(logging.WARNING, logger="digest.pipeline"):
            AuditReportPipeline(generator_config, generator=failing_generator, enricher=enricher).run(
                "0xABC", scenario_d_findings())
        assert "canned generation for 0xABC failed" in caplog.text

    def test_unexpected_generator_exception_falls_back(self, generator_config, enricher):
        generator = CannedGenerator(error=RuntimeError("boom"))
        result = AuditReportPipeline(generator_config, generator=generator, enricher=enricher).run(
            "0xABC", scenario_d_findings())
        assert result.source == SOURCE_DETERMINISTIC

    def test_deterministic_only_bypasses_generator(self, deterministic_config, enricher):
        generator = CannedGenerator("anything")
        result = AuditReportPipeline(deterministic_config, generator=generator, enricher=enricher).run(
            "0xABC", scenario_d_findings())
        assert generator.prompts == []
        assert result.fallback_reason == "deterministic-only mode"

    def test_empty_findings_skip_generator(self, generator_config, enricher):
        generator = CannedGenerator("# High Severity\n")
        result = AuditReportPipeline(generator_config, generator=generator, enricher=enricher).run("0xABC", [])
        assert generator.prompts == []
        assert result.markdown == no_issues_message("0xABC")

    def test_no_generator_configured(self, generator_config, enricher):
        result = AuditReportPipeline(generator_config, enricher=enricher).run("0xABC", scenario_d_findings())
        assert result.source == SOURCE_DETERMINISTIC
        assert result.fallback_reason == "no generator configured"


class TestStorageAndInput:
    """Report persistence and Slither document input"""

    def test_report_written_to_store(self, deterministic_config, enricher, tmp_path):
        store = ReportStore(tmp_path / "reports")
        result = AuditReportPipeline(deterministic_config, enricher=enricher, store=store).run(
            "0xABC", scenario_d_findings())

        path = tmp_path / "reports" / "0xABC" / "audit-summary.md"
        assert result.report_path == str(path)
        assert path.read_text(encoding='utf-8') == result.markdown

    def test_run_report_from_slither_document(self, deterministic_config, enricher, sample_report):
        result = AuditReportPipeline(deterministic_config, enricher=enricher).run_report("0xABC", sample_report)
        counts = count_subheadings(result.markdown)
        assert counts[Severity.HIGH] == 1
        assert counts[Severity.LOW] == 1
        assert counts[Severity.INFORMATIONAL] == 1

    def test_default_enricher_uses_bundled_registry(self):
        pipeline = AuditReportPipeline(DigestConfig(deterministic_only=True))
        result = pipeline.run("0xABC", [make_raw()])
        assert result.findings[0].knowledge.id == 'SWC-112'


class SlowGenerator(CannedGenerator):
    def generate(self, prompt):
        time.sleep(0.5)
        return super().generate(prompt)


class TestRunAsync:
    """Asynchronous runs"""

    def test_async_accepts_valid_candidate(self, generator_config, enricher):
        candidate = "# High Severity\n\n## Controlled Delegatecall\nText.\n"
        pipeline = AuditReportPipeline(generator_config, generator=CannedGenerator(candidate), enricher=enricher)
        result = asyncio.run(pipeline.run_async("0xABC", [make_raw()]))
        assert result.source == SOURCE_GENERATED

    def test_async_timeout_falls_back(self, enricher):
        config = DigestConfig(generator_timeout=0.05)
        generator = SlowGenerator("# High Severity\n\n## Controlled Delegatecall\n")
        pipeline = AuditReportPipeline(config, generator=generator, enricher=enricher)
        result = asyncio.run(pipeline.run_async("0xABC", [make_raw()]))
        assert result.source == SOURCE_DETERMINISTIC
        assert "timed out" in result.fallback_reason

    def test_parallel_runs_are_independent(self, generator_config, enricher):
        async def run_all():
            pipeline_a = AuditReportPipeline(generator_config, generator=CannedGenerator("junk"), enricher=enricher)
            pipeline_b = AuditReportPipeline(generator_config, generator=CannedGenerator("junk"), enricher=enricher)
            return await asyncio.gather(
                pipeline_a.run_async("0xAAA", [make_raw()]),
                pipeline_b.run_async("0xBBB", []),
            )

        first, second = asyncio.run(run_all())
        assert "## Controlled Delegatecall" in first.markdown
        assert second.markdown == no_issues_message("0xBBB")
