from dataclasses import dataclass, field
from typing import FrozenSet, Tuple

RULESET_VERSION = "2024.1"


@dataclass(frozen=True)
class Weights:
    """Per-signal weights and caps used by RiskScorer"""
    free_email: int = 30
    phone: int = 18
    payment_id: int = 45

    payment_keyword: int = 18
    payment_keyword_cap: int = 60
    scam_phrase: int = 12
    scam_phrase_cap: int = 36
    action_phrase: int = 15
    action_phrase_cap: int = 45

    suspicious_tld: int = 22
    multiple_hyphens: int = 8
    high_entropy: int = 14
    plain_http: int = 6

    exclamation: int = 4
    all_caps: int = 6
    contradiction: int = 14


@dataclass(frozen=True)
class Ruleset:
    """
    Immutable detection configuration.

    One instance is built at import time (DEFAULT_RULESET) and handed to
    RiskScorer. Tests build their own instances with dataclasses.replace().
    """
    version: str = RULESET_VERSION

    # ===== HOSTNAME =====
    suspicious_tlds: FrozenSet[str] = frozenset({
        'xyz', 'info', 'top', 'bit', 'club', 'loan', 'online', 'site',
    })

    # Bare domains are only picked up when they end in one of these
    bare_domain_tlds: Tuple[str, ...] = (
        'com', 'in', 'xyz', 'info', 'org', 'net', 'club', 'site', 'online',
    )

    entropy_clamp: float = 6.0
    entropy_threshold: float = 3.5
    max_hyphens: int = 1

    # ===== CONTACT CHANNELS =====
    free_email_providers: Tuple[str, ...] = (
        'gmail', 'yahoo', 'hotmail', 'outlook', 'rediff', 'yandex', 'protonmail',
    )

    # ===== KEYWORD LISTS =====
    payment_keywords: Tuple[str, ...] = (
        'processing fee', 'registration fee', 'security deposit', 'pay before', 'pay to',
        'refund', 'transfer', 'upi', 'bank account', 'account number', 'pay via', 'paytm',
        'gpay', 'phonepe', 'deposit', 'send money', 'send ₹', 'send rs', 'send rs.',
        'send inr', 'pay now', 'pay ₹', 'pay rs', 'join fee',
    )

    scam_phrases: Tuple[str, ...] = (
        'work from home', 'earn ₹', 'earn rs', 'earn per day', 'no interview',
        'join immediately', 'urgent hiring', 'limited seats', 'only', 'guaranteed',
        '100% placement', 'get paid daily', 'no experience required', 'apply now',
        'contact hr',
    )

    action_phrases: Tuple[str, ...] = (
        'send screenshot', 'send payment', 'send money', 'you are selected',
        'selected for internship', 'selected for job', 'pay to confirm',
        'pay to process', 'pay now',
    )

    no_fee_phrases: Tuple[str, ...] = (
        'no fees', 'no fee', 'no payment required',
    )

    # ===== SURFACE FEATURES =====
    max_exclamations: int = 2
    caps_ratio_threshold: float = 0.6

    # ===== CATEGORY THRESHOLDS =====
    high_threshold: int = 60
    medium_threshold: int = 30

    weights: Weights = field(default_factory=Weights)


DEFAULT_RULESET = Ruleset()
