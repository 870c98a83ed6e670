"""
Candidate report generators.

A candidate generator turns a prompt into Markdown using an external language
model. Its output is untrusted: the pipeline validates it before use and falls
back to the deterministic report on any failure.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import requests
from openai import OpenAI, OpenAIError

from .check_catalog import EXTERNAL_CALL_WRITE_SENTENCE
from .models import NormalizedFinding

logger = logging.getLogger(__name__)


class CandidateGenerationError(Exception):
    """The generator could not produce a candidate report."""


class CandidateTextSource(ABC):
    """Anything that can turn a prompt into candidate Markdown."""

    name = "candidate"

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Return generated Markdown or raise CandidateGenerationError."""


def build_summary_prompt(subject: str, findings: List[NormalizedFinding]) -> str:
    """Auditor prompt carrying the enriched findings as JSON."""
    issues = json.dumps([f.to_prompt_dict() for f in findings], indent=2)
    needs_sentence = any(f.facts.state_write_after_external_call for f in findings)

    rules = [
        "- Group findings by severity, in the order High, Medium, Low, Informational.",
        "- Start each severity group with a heading `# <Severity> Severity` and only include severities that have findings.",
        "- Write exactly one `## <title>` heading per finding, using the finding's title. Do not merge or split findings.",
        "- Do not add any other headings, a table of contents, or links to sections of this document.",
        "- Explain the risk in plain English and suggest practical remediations (prefer the SWC remediation text when present).",
        "- Add the SWC references where relevant.",
    ]
    if needs_sentence:
        rules.append(
            "- For findings where state is written after an external call, include this sentence verbatim: "
            f"\"{EXTERNAL_CALL_WRITE_SENTENCE}\""
        )

    return (
        "You are a Solidity security auditor.\n\n"
        f"Here are Slither findings for {subject}, enriched with SWC registry references:\n"
        f"{issues}\n\n"
        "Summarize them as a Markdown report following these rules:\n"
        + "\n".join(rules)
        + "\n"
    )


class OllamaCandidateGenerator(CandidateTextSource):
    """Generates candidates through a local Ollama server."""

    name = "ollama"

    def __init__(self, base_url: str = "http://localhost:11434", model: str = "mistral", timeout: float = 120.0):
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout

    def generate(self, prompt: str) -> str:
        url = f"{self.base_url}/api/generate"
        payload = {"model": self.model, "prompt": prompt, "stream": False}

        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            raise CandidateGenerationError(f"Ollama timed out after {self.timeout}s") from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise CandidateGenerationError(f"Ollama request failed: {e}") from e

        if not isinstance(data, dict):
            raise CandidateGenerationError("Ollama returned an unexpected payload")
        if data.get('error'):
            raise CandidateGenerationError(f"Ollama error: {data['error']}")

        text = data.get('response') or ''
        if not text.strip():
            raise CandidateGenerationError("Ollama returned an empty response")
        return text


class OpenAICandidateGenerator(CandidateTextSource):
    """Generates candidates through the OpenAI chat completions API."""

    name = "openai"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 120.0, client: Optional[OpenAI] = None):
        self.model = model
        self.timeout = timeout
        self.client = client or OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def generate(self, prompt: str) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                timeout=self.timeout,
            )
        except OpenAIError as e:
            raise CandidateGenerationError(f"OpenAI request failed: {e}") from e

        choices = getattr(completion, 'choices', None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise CandidateGenerationError("OpenAI returned an empty completion")
        return content


def create_candidate_generator(config) -> Optional[CandidateTextSource]:
    """Build the generator selected by ``config.generator_provider``.

    Returns None when the provider cannot be used, e.g. OpenAI without an
    API key.
    """
    provider = (config.generator_provider or '').strip().lower()

    if provider == 'ollama':
        return OllamaCandidateGenerator(
            base_url=config.ollama_base_url,
            model=config.ollama_model,
            timeout=config.generator_timeout,
        )

    if provider == 'openai':
        if not config.openai_api_key:
            logger.warning("OpenAI provider selected but no API key configured")
            return None
        return OpenAICandidateGenerator(
            api_key=config.openai_api_key,
            model=config.openai_model,
            timeout=config.generator_timeout,
        )

    logger.warning(f"Unknown generator provider '{config.generator_provider}'")
    return None
