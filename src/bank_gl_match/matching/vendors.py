"""
Vendor name normalization.

Bank vendors and ledger names are reduced to a comparable token: a canonical
name from the synonym table when one of its fragments appears, otherwise the
first word left after stripping common payment prefixes.
"""

from typing import Iterable, Literal, Mapping, Optional
import logging
import re

from ..config import VendorConfig

logger = logging.getLogger(__name__)

SynonymRule = tuple[str, tuple[str, ...]]


def build_synonym_rules(
    base: Mapping[str, Iterable[str]],
    extra: Optional[Mapping[str, Iterable[str]]] = None,
    precedence: Literal["extend", "override"] = "extend",
) -> list[SynonymRule]:
    """
    Merge the built-in synonym table with an external mapping into ordered rules.

    Base keys keep their position and come first; new external keys follow
    in their own order. For a key present in both, ``extend`` appends the
    external fragments after the base ones and ``override`` replaces them.
    Fragments are uppercased since they are matched against uppercased names.
    """
    merged: dict[str, list[str]] = {
        canonical: [f.upper() for f in fragments] for canonical, fragments in base.items()
    }

    for canonical, fragments in (extra or {}).items():
        upper = [f.upper() for f in fragments]
        if canonical in merged and precedence == "extend":
            merged[canonical].extend(f for f in upper if f not in merged[canonical])
        else:
            merged[canonical] = upper

    return [
        (canonical, tuple(f for f in fragments if f))
        for canonical, fragments in merged.items()
    ]


class VendorNormalizer:
    """Canonicalizes free-text vendor names for comparison."""

    def __init__(
        self,
        rules: list[SynonymRule],
        peer_payment_marker: str = "ZELLE",
        routing_token: str = "JPM",
        strip_prefixes: Iterable[str] = (),
    ):
        self.rules = rules
        self.peer_payment_marker = peer_payment_marker.upper()
        self.strip_prefixes = tuple(strip_prefixes)
        self._peer_pattern = re.compile(
            rf"{re.escape(self.peer_payment_marker)} PAYMENT (?:TO|FROM)\s+"
            rf"([A-Z\s]+?)(?:\s+{re.escape(routing_token.upper())}|$)"
        )

    @classmethod
    def from_config(
        cls,
        config: VendorConfig,
        extra_synonyms: Optional[Mapping[str, Iterable[str]]] = None,
    ) -> "VendorNormalizer":
        rules = build_synonym_rules(
            config.base_synonyms, extra_synonyms, config.synonym_precedence
        )
        if extra_synonyms:
            logger.info(
                f"Merged {len(extra_synonyms)} external vendor groups "
                f"({config.synonym_precedence}), {len(rules)} rules total"
            )
        return cls(
            rules,
            peer_payment_marker=config.peer_payment_marker,
            routing_token=config.routing_token,
            strip_prefixes=config.strip_prefixes,
        )

    def normalize(self, vendor: str, description: Optional[str] = None) -> str:
        """
        Reduce a vendor name to its comparison token.

        Args:
            vendor: Free-text vendor or ledger name
            description: Bank description, used to pull the counterparty out
                of peer-to-peer payments

        Returns:
            Canonical name, first word of the name, or "" for an empty vendor
        """
        if not vendor:
            return ""

        normalized = vendor.upper().strip()

        if normalized == self.peer_payment_marker and description:
            person = self._peer_name(description)
            if person:
                return person

        for canonical, fragments in self.rules:
            if any(fragment in normalized for fragment in fragments):
                return canonical

        for prefix in self.strip_prefixes:
            normalized = normalized.replace(prefix, "", 1).strip()

        words = normalized.split()
        return words[0] if words else ""

    def _peer_name(self, description: str) -> Optional[str]:
        """First word of the person named in a peer payment description."""
        match = self._peer_pattern.search(description.upper())
        if not match:
            return None
        words = match.group(1).split()
        return words[0] if words else None
