#!/usr/bin/env python3
"""
Slither Digest: trustworthy Markdown summaries of Slither findings

Main entry point for the CLI interface.
"""

import argparse
import logging
import sys

from cli.main import DigestCLI


def main(argv=None):
    """Main entry point for Slither Digest CLI."""
    parser = argparse.ArgumentParser(
        description="Slither Digest: turn Slither JSON output into a validated Markdown audit summary",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  slither-digest report slither-report.json --subject 0xABC
  slither-digest report slither-report.json --subject 0xABC --deterministic --print
  slither-digest config --show
        """
    )
    parser.add_argument('--version', action='store_true', help='Show version and exit')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    report_parser = subparsers.add_parser('report', help='Summarize a Slither JSON report')
    report_parser.add_argument('report', help='Path to the Slither --json output')
    report_parser.add_argument('--subject', required=True, help='Audited contract address or name')
    report_parser.add_argument('--deterministic', action='store_true', help='Skip the text generator and render deterministically')
    report_parser.add_argument('--provider', choices=['ollama', 'openai'], help='Candidate generator provider')
    report_parser.add_argument('--timeout', type=float, help='Generator timeout in seconds')
    report_parser.add_argument('--output-dir', '-o', help='Directory for saved reports')
    report_parser.add_argument('--print', dest='print_report', action='store_true', help='Print the final Markdown')

    config_parser = subparsers.add_parser('config', help='Manage configuration settings')
    config_parser.add_argument('--show', action='store_true', help='Show current configuration')
    config_parser.add_argument('--set-provider', choices=['ollama', 'openai'], help='Set the default generator provider')
    config_parser.add_argument('--set-openai-key', help='Set OpenAI API key')
    config_parser.add_argument('--deterministic-only', choices=['on', 'off'], help='Enable or disable deterministic-only rendering')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cli = DigestCLI()

    if args.version:
        cli.show_version()
        return 0

    if not args.command:
        parser.print_help()
        return 1

    if args.command == 'report':
        return cli.run_report(
            args.report,
            args.subject,
            deterministic=args.deterministic,
            provider=args.provider,
            timeout=args.timeout,
            output_dir=args.output_dir,
            print_report=args.print_report,
        )

    if args.command == 'config':
        config = cli.config_manager.config
        changed = False
        if args.set_provider:
            config.generator_provider = args.set_provider
            changed = True
        if args.set_openai_key:
            config.openai_api_key = args.set_openai_key
            changed = True
        if args.deterministic_only:
            config.deterministic_only = args.deterministic_only == 'on'
            changed = True
        if changed:
            cli.config_manager.save_config()
        if args.show or not changed:
            return cli.show_config()
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
