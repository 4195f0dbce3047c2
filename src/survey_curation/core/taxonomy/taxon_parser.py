"""
TaxonParser: decomposes free-text taxon labels into family, genus and species.

Parsing is deterministic and table-driven: a static genus correction table
(exact, case-sensitive) is the only correction applied. No fuzzy matching and
no lookup against an external species registry.
"""

import re
from typing import Mapping

from survey_curation.core.errors import TaxonomyError
from survey_curation.core.models import CurationWarning, Qualifier, TaxonComponents, ValidatedRecord
from survey_curation.core.models.taxon_components import FAMILY_SUFFIXES

# "Genus (Subgenus) rest"
SUBGENUS_RE = re.compile(r"^(?P<genus>\S+)\s*\((?P<subgenus>[A-Z][a-z]+)\)\s*(?P<rest>.*)$")
PARENTHETICAL_RE = re.compile(r"\([^)]*\)")
CITATION_YEAR_RE = re.compile(r",?\s*\b\d{4}\b")
# sp, sp., spp, spp., sp1, sp.1, spA, sp.A
UNCERTAIN_RE = re.compile(r"^[Ss]pp?\.?(?:(?P<number>\d+)|(?P<letter>[A-Z]))?$")
MORPH_MARKER_RE = re.compile(r"^(?:\d+|[A-Z])$")
GENUS_RE = re.compile(r"^[A-Za-z][A-Za-z\-]*$")
EPITHET_RE = re.compile(r"^[a-z][a-z\-]*$")

AGGREGATE_MARKERS = {"agg", "aggr", "aggregate", "complex"}
CONFIDENCE_MARKERS = {"cf", "aff", "nr", "near"}
INFRASPECIFIC_MARKERS = {"subsp", "ssp", "var", "f", "forma", "morph", "ab"}
PLACEHOLDER_LABELS = {
    "", "na", "n/a", "nan", "none", "null", "unknown", "unidentified",
    "indet", "indet.", "unid", "unid.", "?", "-",
}


def _strip_punctuation(token: str) -> str:
    return token.strip(".,;:'\"")


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


class TaxonParser:
    """
    Parses contributor taxon labels.

    Args:
        genus_corrections: Known genus misspelling -> correct genus
        promote_subgenus: When a label reads "Genus (Subgenus) epithet",
            use the subgenus as the genus
    """

    def __init__(
        self,
        genus_corrections: Mapping[str, str] | None = None,
        promote_subgenus: bool = True,
    ):
        """
        Raises:
            ValueError: If a correction does not name a single genus word
        """
        self.genus_corrections = dict(genus_corrections or {})
        self.promote_subgenus = promote_subgenus
        for wrong, right in self.genus_corrections.items():
            if not GENUS_RE.match(right) or right.lower().endswith(FAMILY_SUFFIXES):
                raise ValueError(f"genus correction {wrong!r} -> {right!r} is not a single genus word")

    def parse(self, label: str | None, family: str | None = None) -> TaxonComponents:
        """
        Decompose a taxon label.

        Args:
            label: Free-text "Genus epithet ..." label
            family: Separately supplied family label

        Returns:
            TaxonComponents

        Raises:
            TaxonomyError: UnparsableLabel when nothing identifiable remains
        """
        components, _ = self.parse_with_warnings(label, family)
        return components

    def parse_with_warnings(
        self,
        label: str | None,
        family: str | None = None,
    ) -> tuple[TaxonComponents, list[tuple[str, str]]]:
        """
        Decompose a taxon label and report anomalies that did not drop it.

        Returns:
            (components, [(warning_kind, message), ...])

        Raises:
            TaxonomyError: UnparsableLabel when nothing identifiable remains
        """
        warnings: list[tuple[str, str]] = []
        family_name = self._normalize_family(family)
        text = " ".join(str(label).split()) if label is not None else ""

        if text.lower() in PLACEHOLDER_LABELS:
            return self._family_level(label, family_name), warnings

        text = self._strip_annotations(text)
        tokens = [t for t in (_strip_punctuation(tok) for tok in text.replace("?", " ").split()) if t]

        aggregate = False
        kept: list[str] = []
        for token in tokens:
            marker = token.lower()
            if marker in AGGREGATE_MARKERS:
                aggregate = True
            elif marker in CONFIDENCE_MARKERS:
                warnings.append((
                    "ConfidenceQualifierRemoved",
                    f"Removed '{token}' from taxon label {label!r}",
                ))
            else:
                kept.append(token)

        if not kept or UNCERTAIN_RE.match(kept[0]) or kept[0].lower() in PLACEHOLDER_LABELS:
            return self._family_level(label, family_name), warnings

        genus_token = kept[0]
        if genus_token.lower().endswith(FAMILY_SUFFIXES):
            warnings.append((
                "FamilyInGenusPosition",
                f"'{genus_token}' looks like a family name in the genus position of {label!r}",
            ))
            return self._family_level(label, family_name or _capitalize(genus_token)), warnings

        if not GENUS_RE.match(genus_token):
            raise TaxonomyError(
                TaxonomyError.UNPARSABLE_LABEL,
                label,
                f"Genus token {genus_token!r} of {label!r} is not a word",
            )

        genus = _capitalize(self.genus_corrections.get(genus_token, genus_token))
        species, qualifier = self._classify_epithet(kept[1:], aggregate, label, warnings)

        return TaxonComponents(family=family_name, genus=genus, species=species, qualifier=qualifier), warnings

    def parse_record(self, record: ValidatedRecord) -> tuple[ValidatedRecord, list[CurationWarning]]:
        """
        Parse a record's taxon label and family.

        Returns:
            (record with family/genus/species/qualifier set, warnings)

        Raises:
            TaxonomyError: UnparsableLabel
        """
        components, found = self.parse_with_warnings(record.taxon, record.family)
        warnings = [
            CurationWarning(record_id=record.record_id, kind=kind, message=message)
            for kind, message in found
        ]
        parsed = record.model_copy(update={
            "family": components.family,
            "genus": components.genus,
            "species": components.species,
            "qualifier": components.qualifier,
        })
        return parsed, warnings

    def _strip_annotations(self, text: str) -> str:
        """Remove subgenus, author and date annotations."""
        match = SUBGENUS_RE.match(text)
        if match:
            genus = match.group("subgenus") if self.promote_subgenus else match.group("genus")
            text = f"{genus} {match.group('rest')}"
        text = PARENTHETICAL_RE.sub(" ", text)
        return CITATION_YEAR_RE.sub(" ", text)

    def _classify_epithet(
        self,
        tokens: list[str],
        aggregate: bool,
        label: str | None,
        warnings: list[tuple[str, str]],
    ) -> tuple[str, Qualifier]:
        epithet_tokens = tokens
        for index, token in enumerate(tokens):
            if token.lower() in INFRASPECIFIC_MARKERS:
                epithet_tokens = tokens[:index]
                break

        if not epithet_tokens:
            return self._unresolved("sp", aggregate)

        first = epithet_tokens[0]
        uncertain = UNCERTAIN_RE.match(first)
        if uncertain:
            marker = uncertain.group("number") or uncertain.group("letter")
            if marker is None and len(epithet_tokens) > 1 and MORPH_MARKER_RE.match(epithet_tokens[1]):
                marker = epithet_tokens[1]
            return self._unresolved(f"sp{marker or ''}", aggregate)

        if first.isdigit():
            return self._unresolved(f"sp{first}", aggregate)

        if first[:1].isupper():
            # Author citation directly after the genus: no epithet given
            return self._unresolved("sp", aggregate)

        epithet = first.lower()
        if not EPITHET_RE.match(epithet):
            warnings.append((
                "EpithetNotRecognised",
                f"Epithet {first!r} of {label!r} is not a word; recorded as unresolved",
            ))
            return self._unresolved("sp", aggregate)

        if aggregate:
            return f"{epithet} agg.", Qualifier.AGGREGATE
        return epithet, Qualifier.NONE

    @staticmethod
    def _unresolved(marker: str, aggregate: bool) -> tuple[str, Qualifier]:
        if aggregate:
            return "agg.", Qualifier.AGGREGATE
        return marker, Qualifier.UNCERTAIN

    @staticmethod
    def _normalize_family(family: str | None) -> str:
        if family is None:
            return ""
        text = " ".join(str(family).split())
        if text.lower() in PLACEHOLDER_LABELS:
            return ""
        return _capitalize(text) if " " not in text else text

    @staticmethod
    def _family_level(label: str | None, family: str) -> TaxonComponents:
        if not family:
            raise TaxonomyError(TaxonomyError.UNPARSABLE_LABEL, label)
        return TaxonComponents(family=family, genus="", species="sp", qualifier=Qualifier.UNCERTAIN)
