"""
Shared test fixtures for the Slither Digest test suite.

Provides sample Slither detector output, raw and normalized findings, canned
candidate generators and temporary report directories.
"""

from typing import List, Optional

import pytest

from digest.candidate_generators import CandidateGenerationError, CandidateTextSource
from digest.config_manager import DigestConfig
from digest.knowledge_enricher import KnowledgeEnricher
from digest.models import RawFinding, RawLocation
from digest.normalizer import FindingNormalizer
from digest.swc_registry import SWCRegistry


# ── Sample Slither detector descriptions ────────────────────────

DELEGATECALL_DESCRIPTION = (
    "Proxy.forward(address,bytes) (contracts/Proxy.sol#7-10) uses delegatecall to a input-controlled function id\n"
    "\t- (success,None) = target.delegatecall(data) (contracts/Proxy.sol#8)\n"
)

REENTRANCY_DESCRIPTION = (
    "Reentrancy in Vault.withdraw(uint256) (contracts/Vault.sol#20-26):\n"
    "\tExternal calls:\n"
    "\t- (success,None) = msg.sender.call{value: amount}() (contracts/Vault.sol#22)\n"
    "\tState variables written after the call(s):\n"
    "\t- balances[msg.sender] = 0 (contracts/Vault.sol#24)\n"
)

ZERO_CHECK_DESCRIPTION = (
    "Vault.setOwner(address).newOwner (contracts/Vault.sol#30) lacks a zero-check on :\n"
    "\t\t- owner = newOwner (contracts/Vault.sol#31)\n"
)

LOW_LEVEL_DESCRIPTION = (
    "Low level call in Vault.withdraw(uint256) (contracts/Vault.sol#20-26):\n"
    "\t- (success,None) = msg.sender.call{value: amount}() (contracts/Vault.sol#22)\n"
)

NAMING_DESCRIPTION = (
    "Parameter Vault.setOwner(address)._newOwner (contracts/Vault.sol#30) is not in mixedCase\n"
)


def slither_element(name, filename, line):
    return {
        'type': 'function',
        'name': name,
        'source_mapping': {
            'filename_relative': filename,
            'lines': [line, line + 1],
        },
    }


def slither_detector(check, impact, description, elements, confidence='Medium'):
    return {
        'check': check,
        'impact': impact,
        'confidence': confidence,
        'description': description,
        'elements': elements,
    }


SAMPLE_SLITHER_REPORT = {
    'success': True,
    'error': None,
    'results': {
        'detectors': [
            slither_detector(
                'reentrancy-eth', 'High', REENTRANCY_DESCRIPTION,
                [slither_element('withdraw', 'contracts/Vault.sol', 20)],
            ),
            slither_detector(
                'missing-zero-check', 'Low', ZERO_CHECK_DESCRIPTION,
                [slither_element('newOwner', 'contracts/Vault.sol', 30)],
            ),
            slither_detector(
                'low-level-calls', 'Informational', LOW_LEVEL_DESCRIPTION,
                [slither_element('withdraw', 'contracts/Vault.sol', 20)],
                confidence='High',
            ),
        ]
    },
}


def make_raw(check='controlled-delegatecall', impact='High', description=DELEGATECALL_DESCRIPTION,
             locations=(('contracts/Proxy.sol', 8, 'forward'),), confidence='Medium') -> RawFinding:
    return RawFinding(
        check=check,
        impact=impact,
        confidence=confidence,
        description=description,
        elements=tuple(RawLocation(file=f, line=l, name=n) for f, l, n in locations),
    )


class CannedGenerator(CandidateTextSource):
    """Returns a fixed candidate and records how often it was asked."""

    name = "canned"

    def __init__(self, text: Optional[str] = None, error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def registry():
    return SWCRegistry.load()


@pytest.fixture
def enricher(registry):
    return KnowledgeEnricher(registry)


@pytest.fixture
def normalizer(enricher):
    return FindingNormalizer(enricher)


@pytest.fixture
def sample_report():
    return SAMPLE_SLITHER_REPORT


@pytest.fixture
def deterministic_config(tmp_path):
    return DigestConfig(deterministic_only=True, reports_dir=str(tmp_path / "reports"))


@pytest.fixture
def generator_config(tmp_path):
    return DigestConfig(deterministic_only=False, generator_timeout=5, reports_dir=str(tmp_path / "reports"))


@pytest.fixture
def failing_generator():
    return CannedGenerator(error=CandidateGenerationError("connection refused"))
