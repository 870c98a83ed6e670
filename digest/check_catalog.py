"""
Per-check lookup tables for Slither detectors.

Titles and risk/remediation guidance are keyed by the Slither check identifier.
Unknown checks fall back to the raw identifier (title) and to the raw
description plus a generic remediation (guidance).
"""

from typing import Dict, Tuple


# Fixed wording. Generated reports must reproduce it verbatim when any finding
# has a state write after an external call.
EXTERNAL_CALL_WRITE_SENTENCE = (
    "State variables are written after an external call, so a re-entrant "
    "caller can observe and act on stale state."
)

UNKNOWN_CHECK_TITLE = "Unknown Check"

GENERIC_REMEDIATION = (
    "Review the flagged code, confirm whether the behaviour is intended, and "
    "apply the fix recommended in the Slither detector documentation."
)


CHECK_TITLES: Dict[str, str] = {
    'arbitrary-send-erc20': 'Arbitrary ERC20 transferFrom',
    'arbitrary-send-eth': 'Arbitrary ETH Send',
    'assembly': 'Inline Assembly Usage',
    'calls-loop': 'External Calls Inside a Loop',
    'constable-states': 'State Variable Could Be Constant',
    'controlled-delegatecall': 'Controlled Delegatecall',
    'delegatecall-loop': 'Delegatecall Inside a Loop',
    'events-access': 'Missing Events on Access Control Changes',
    'events-maths': 'Missing Events on Arithmetic Changes',
    'immutable-states': 'State Variable Could Be Immutable',
    'locked-ether': 'Contract Locks Ether',
    'low-level-calls': 'Low-Level Calls',
    'missing-zero-check': 'Missing Zero-Address Validation',
    'naming-convention': 'Naming Convention Violation',
    'reentrancy-benign': 'Reentrancy (Benign)',
    'reentrancy-eth': 'Reentrancy (ETH Transfer)',
    'reentrancy-events': 'Reentrancy (Event Ordering)',
    'reentrancy-no-eth': 'Reentrancy (No ETH Transfer)',
    'reentrancy-unlimited-gas': 'Reentrancy (Unlimited Gas)',
    'solc-version': 'Incorrect Solidity Version',
    'suicidal': 'Unprotected selfdestruct',
    'timestamp': 'Block Timestamp Dependence',
    'tx-origin': 'Dangerous Use of tx.origin',
    'unchecked-lowlevel': 'Unchecked Low-Level Call',
    'unchecked-send': 'Unchecked Send',
    'unchecked-transfer': 'Unchecked Token Transfer',
    'uninitialized-state': 'Uninitialized State Variable',
    'unused-return': 'Unused Return Value',
}


# check -> (risk sentence, remediation sentence)
CHECK_GUIDANCE: Dict[str, Tuple[str, str]] = {
    'arbitrary-send-erc20': (
        "transferFrom is called with a `from` address the caller controls, so anyone can move tokens approved to this contract.",
        "Use msg.sender as the `from` address or restrict the function to trusted callers.",
    ),
    'arbitrary-send-eth': (
        "Ether can be sent to an address chosen by an arbitrary caller, allowing funds to be drained.",
        "Restrict who can trigger the transfer and validate the destination address.",
    ),
    'assembly': (
        "Inline assembly bypasses Solidity's safety checks and is harder to audit.",
        "Limit assembly to well-reviewed, documented blocks or replace it with high-level Solidity.",
    ),
    'calls-loop': (
        "An external call inside a loop lets a single failing or expensive callee block the whole transaction.",
        "Favour pull-over-push patterns and bound the number of iterations.",
    ),
    'controlled-delegatecall': (
        "A delegatecall target or payload is controlled by the caller, letting an attacker run arbitrary code in this contract's storage context.",
        "Never delegatecall into user-supplied addresses or data; whitelist trusted implementation contracts.",
    ),
    'delegatecall-loop': (
        "delegatecall inside a payable loop reuses msg.value on every iteration.",
        "Move value accounting out of the loop or drop the payable modifier.",
    ),
    'events-access': (
        "Ownership or role changes are not announced, so off-chain monitoring cannot detect them.",
        "Emit an event whenever privileged addresses change.",
    ),
    'events-maths': (
        "Critical parameters change without an event, hiding them from off-chain monitoring.",
        "Emit an event for every update of critical arithmetic parameters.",
    ),
    'locked-ether': (
        "The contract can receive ether but has no way to withdraw it.",
        "Add a guarded withdrawal function or reject incoming ether.",
    ),
    'low-level-calls': (
        "Low-level calls skip type checks and return false instead of reverting, so failures can go unnoticed.",
        "Check the returned success flag and prefer high-level calls or audited wrappers such as OpenZeppelin Address.",
    ),
    'missing-zero-check': (
        "An address parameter is stored or used without checking it against the zero address, which can brick ownership or send funds to an unrecoverable address.",
        "Add `require(addr != address(0))` before using the parameter.",
    ),
    'naming-convention': (
        "Identifiers do not follow the Solidity naming conventions, which makes the code harder to review.",
        "Rename the identifier to follow the Solidity style guide (mixedCase for functions and variables, CapWords for contracts).",
    ),
    'reentrancy-benign': (
        "State is modified after an external call; the current write looks benign but the ordering is fragile.",
        "Follow checks-effects-interactions: update state before making external calls.",
    ),
    'reentrancy-eth': (
        "A re-entrant call can withdraw ether multiple times before the balance is updated.",
        "Apply checks-effects-interactions and protect the function with a reentrancy guard.",
    ),
    'reentrancy-events': (
        "Events are emitted after an external call, so a re-entrant call can reorder them.",
        "Emit events before making external calls.",
    ),
    'reentrancy-no-eth': (
        "A re-entrant call can observe and modify state before this function finishes updating it.",
        "Apply checks-effects-interactions and protect the function with a reentrancy guard.",
    ),
    'reentrancy-unlimited-gas': (
        "transfer/send forward limited gas today, but gas repricing can make this reentrancy exploitable.",
        "Update state before transferring ether and do not rely on the 2300 gas stipend.",
    ),
    'solc-version': (
        "The pragma allows compiler versions with known bugs.",
        "Pin a recent, audited compiler version.",
    ),
    'suicidal': (
        "Anyone can call selfdestruct and destroy the contract.",
        "Protect selfdestruct with access control or remove it.",
    ),
    'timestamp': (
        "block.timestamp is used in a comparison that a validator can influence within a small window.",
        "Avoid relying on block.timestamp for critical decisions or tolerate a drift of several seconds.",
    ),
    'tx-origin': (
        "tx.origin is used for authorization, so a malicious contract can act on behalf of a phished owner.",
        "Use msg.sender for authorization checks.",
    ),
    'unchecked-lowlevel': (
        "The return value of a low-level call is ignored, so a failed call is treated as success.",
        "Check the success flag returned by the call and revert on failure.",
    ),
    'unchecked-send': (
        "The return value of send is ignored, so failed ether transfers go unnoticed.",
        "Check the return value of send or use call with an explicit success check.",
    ),
    'unchecked-transfer': (
        "The boolean returned by an ERC20 transfer is ignored, so failed transfers go unnoticed.",
        "Use OpenZeppelin SafeERC20 or check the returned value.",
    ),
    'uninitialized-state': (
        "A state variable is read before it is ever written, so it holds its zero value.",
        "Initialize the variable in the constructor or at declaration.",
    ),
    'unused-return': (
        "The return value of an external call is ignored.",
        "Check or explicitly handle every returned value.",
    ),
}


def resolve_title(check: str) -> str:
    """Human-readable title for a check, or the raw identifier when unknown."""
    if not (check or '').strip():
        return UNKNOWN_CHECK_TITLE
    return CHECK_TITLES.get(check, check)


def resolve_guidance(check: str, description: str) -> Tuple[str, str]:
    """Risk and remediation sentences for a check."""
    if check in CHECK_GUIDANCE:
        return CHECK_GUIDANCE[check]
    risk = ' '.join((description or '').split()) or 'No description provided by Slither.'
    return risk, GENERIC_REMEDIATION
