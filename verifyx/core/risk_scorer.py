import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from verifyx.core import extractor
from verifyx.core.rules import DEFAULT_RULESET, Ruleset
from verifyx.core.verdict import NO_RED_FLAGS, Verdict, category_for_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Signal:
    """One rule that fired, with its contribution to the score"""
    weight: int
    reason: str
    evidence: Any = None


class RiskScorer:
    def __init__(self, ruleset: Ruleset = DEFAULT_RULESET):
        """
        Rule-based scam scorer.

        The ruleset is read-only; the scorer keeps no state between calls so a
        single instance can serve concurrent requests.
        """
        self.ruleset = ruleset
        self.weights = ruleset.weights

        # Input types that need rewriting before the text rules run
        self.preprocessors: Dict[str, Callable[[str], str]] = {
            'html': extractor.html_to_text,
        }

    def analyze(self, input_type: Optional[str] = 'text', text: Optional[str] = '') -> Verdict:
        """Score one piece of text"""
        input_type = self._normalize_type(input_type)
        raw = str(text) if text else ""

        preprocess = self.preprocessors.get(input_type)
        if preprocess and raw:
            raw = preprocess(raw)

        value = extractor.normalize_text(raw)
        features: Dict[str, Any] = {'inputType': input_type}

        # Order matters for the reasons list only
        signals: List[Signal] = []
        signals += self._contact_signals(value, features)
        signals += self._keyword_signals(value, features)
        signals += self._hostname_signals(value, features)
        signals += self._surface_signals(value, raw, features)

        score = self._aggregate(signals)
        reasons = [s.reason for s in signals]
        if score == 0:
            reasons = [NO_RED_FLAGS]

        return Verdict(
            score=score,
            category=category_for_score(score, self.ruleset),
            reasons=tuple(reasons),
            features=features,
        )

    def _normalize_type(self, input_type: Optional[str]) -> str:
        normalized = (input_type or '').strip().lower()
        return normalized or 'text'

    # ===== 1. CONTACT CHANNELS =====

    def _contact_signals(self, value: str, features: Dict[str, Any]) -> List[Signal]:
        signals = []

        emails = extractor.extract_emails(value)
        free_emails = extractor.find_free_emails(emails, self.ruleset.free_email_providers)
        features['emailCount'] = len(emails)
        features['freeEmailCount'] = len(free_emails)
        if free_emails:
            samples = free_emails[:2]
            signals.append(Signal(
                self.weights.free_email,
                f"Using free email provider ({', '.join(samples)})",
                samples,
            ))

        phones = extractor.extract_phones(value)
        features['phoneCount'] = len(phones)
        if phones:
            signals.append(Signal(
                self.weights.phone,
                f"Phone/WhatsApp number detected ({phones[0]})",
                phones[0],
            ))

        payment_ids = extractor.extract_payment_ids(value)
        features['upiCount'] = len(payment_ids)
        if payment_ids:
            signals.append(Signal(
                self.weights.payment_id,
                f"UPI/payment id detected ({payment_ids[0]})",
                payment_ids[0],
            ))

        return signals

    # ===== 2. KEYWORD LISTS =====

    def _keyword_signals(self, value: str, features: Dict[str, Any]) -> List[Signal]:
        signals = []
        w = self.weights

        payment_count = extractor.count_matches(value, self.ruleset.payment_keywords)
        features['paymentKeywordCount'] = payment_count
        if payment_count:
            signals.append(Signal(
                min(w.payment_keyword_cap, w.payment_keyword * payment_count),
                f"Detected payment-related keywords ({payment_count})",
                payment_count,
            ))

        scam_count = extractor.count_matches(value, self.ruleset.scam_phrases)
        features['scamPhraseCount'] = scam_count
        if scam_count:
            signals.append(Signal(
                min(w.scam_phrase_cap, w.scam_phrase * scam_count),
                f"Detected suspicious phrases ({scam_count})",
                scam_count,
            ))

        action_count = extractor.count_matches(value, self.ruleset.action_phrases)
        features['susPhraseCount'] = action_count
        if action_count:
            signals.append(Signal(
                min(w.action_phrase_cap, w.action_phrase * action_count),
                f"Action/payment flow phrases ({action_count})",
                action_count,
            ))

        return signals

    # ===== 3. HOSTNAME =====

    def _hostname_signals(self, value: str, features: Dict[str, Any]) -> List[Signal]:
        candidate = extractor.find_url_candidate(value, self.ruleset.bare_domain_tlds)
        if not candidate:
            return []

        try:
            hostname = extractor.parse_hostname(candidate)
        except ValueError as e:
            logger.debug(f"Skipping hostname checks for {candidate!r}: {e}")
            return []

        signals = []
        w = self.weights

        features['hostname'] = hostname
        features['registeredDomain'] = extractor.registered_domain(hostname)

        tld = hostname.split('.')[-1]
        features['suspiciousTLD'] = tld in self.ruleset.suspicious_tlds
        if features['suspiciousTLD']:
            signals.append(Signal(w.suspicious_tld, f"Suspicious TLD .{tld}", tld))

        hyphens = hostname.count('-')
        if hyphens > self.ruleset.max_hyphens:
            signals.append(Signal(w.multiple_hyphens, "Hostname contains multiple hyphens", hyphens))

        entropy = extractor.hostname_entropy(hostname, self.ruleset.entropy_clamp)
        features['hostEntropy'] = entropy
        features['highEntropy'] = entropy > self.ruleset.entropy_threshold
        if features['highEntropy']:
            signals.append(Signal(w.high_entropy, "Hostname looks randomized (high entropy)", entropy))

        if candidate.lower().startswith('http://'):
            signals.append(Signal(w.plain_http, "Using http (not https)", candidate))

        return signals

    # ===== 4. SURFACE FEATURES =====

    def _surface_signals(self, value: str, original: str, features: Dict[str, Any]) -> List[Signal]:
        signals = []
        w = self.weights

        exclamations = value.count('!')
        ratio = extractor.caps_ratio(original)
        features['exclamCount'] = exclamations
        features['capsRatio'] = round(ratio, 2)

        if exclamations > self.ruleset.max_exclamations:
            signals.append(Signal(w.exclamation, "Excessive exclamation marks", exclamations))
        if ratio > self.ruleset.caps_ratio_threshold:
            signals.append(Signal(w.all_caps, "Unusual ALL CAPS usage", ratio))

        # Needs the payment keyword count from the keyword stage
        claims_no_fee = extractor.count_matches(value, self.ruleset.no_fee_phrases) > 0
        if claims_no_fee and features.get('paymentKeywordCount', 0) > 0:
            signals.append(Signal(
                w.contradiction,
                "Claims no fees but mentions payment (contradictory)",
                features['paymentKeywordCount'],
            ))

        return signals

    def _aggregate(self, signals: List[Signal]) -> int:
        total = sum(max(0, s.weight) for s in signals)
        return max(0, min(100, int(round(total))))


default_scorer = RiskScorer()


def analyze(input_type: Optional[str] = 'text', text: Optional[str] = '') -> Verdict:
    """Score text with the default ruleset"""
    return default_scorer.analyze(input_type, text)
