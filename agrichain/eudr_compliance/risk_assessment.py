# -*- coding: utf-8 -*-
"""
Risk Assessment Engine - EUDR Compliance Engine

Maps a geolocation ValidationReport and the externally supplied
ComplianceFacts to a RiskAssessment per EUDR Article 10.

Each rule inspects the inputs and proposes zero or one Finding. The final
level is a fold of ``RiskLevel.escalate`` over the proposed levels, starting
at ``negligible``, so adding findings can never lower the result.

Rules:
    1. geolocation     - no features, or invalid geolocation -> non-negligible
    2. deforestation   - check absent or not passed          -> non-negligible
    3. legality        - no legality documents               -> non-negligible
    4. plot_ids        - some plot lacks a plot_id           -> low
    5. quantity        - net mass missing or zero            -> low

Example:
    >>> from agrichain.eudr_compliance.risk_assessment import RiskAssessmentEngine
    >>> assessment = RiskAssessmentEngine().assess(report, facts)
    >>> assessment.level
    <RiskLevel.NEGLIGIBLE: 'negligible'>
"""

from __future__ import annotations

import logging
import time
from functools import reduce
from typing import Callable, Iterable, List, Optional

from agrichain.eudr_compliance.metrics import observe_duration, record_risk_assessment
from agrichain.eudr_compliance.models import (
    ComplianceFacts,
    Finding,
    RiskAssessment,
    RiskLevel,
    ValidationReport,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def check_geolocation(report: ValidationReport, facts: ComplianceFacts) -> Optional[Finding]:
    """Rule 1: plot-level geolocation must be present and valid."""
    if report.feature_count == 0:
        return Finding(
            level=RiskLevel.NON_NEGLIGIBLE,
            mitigation="Provide plot-level geolocation data",
            rule="geolocation",
        )
    if not report.valid:
        return Finding(
            level=RiskLevel.NON_NEGLIGIBLE,
            mitigation="Fix geolocation validation errors: " + ", ".join(report.errors),
            rule="geolocation",
        )
    return None


def check_deforestation(report: ValidationReport, facts: ComplianceFacts) -> Optional[Finding]:
    """Rule 2: a passed deforestation-free verification is required."""
    check = facts.deforestation_check
    if check is None or check.status is not True:
        return Finding(
            level=RiskLevel.NON_NEGLIGIBLE,
            mitigation=(
                "Verify deforestation-free status via satellite imagery "
                "or Global Forest Watch"
            ),
            rule="deforestation",
        )
    return None


def check_legality(report: ValidationReport, facts: ComplianceFacts) -> Optional[Finding]:
    """Rule 3: at least one legality document is required."""
    if not facts.legality_documents:
        return Finding(
            level=RiskLevel.NON_NEGLIGIBLE,
            mitigation=(
                "Upload required legality documents "
                "(land tenure, harvest permit, tax compliance)"
            ),
            rule="legality",
        )
    return None


def check_plot_ids(report: ValidationReport, facts: ComplianceFacts) -> Optional[Finding]:
    """Rule 4: every plot should carry a plot_id."""
    if report.feature_count > 0 and not report.all_plots_identified:
        return Finding(
            level=RiskLevel.LOW,
            mitigation="Assign unique plot_id to all geolocation features for traceability",
            rule="plot_ids",
        )
    return None


def check_quantity(report: ValidationReport, facts: ComplianceFacts) -> Optional[Finding]:
    """Rule 5: the net mass of the batch should be declared."""
    if not facts.quantity_kg:
        return Finding(
            level=RiskLevel.LOW,
            mitigation="Specify net mass quantity in kg",
            rule="quantity",
        )
    return None


RiskRule = Callable[[ValidationReport, ComplianceFacts], Optional[Finding]]

DEFAULT_RULES: List[RiskRule] = [
    check_geolocation,
    check_deforestation,
    check_legality,
    check_plot_ids,
    check_quantity,
]


def fold_level(findings: Iterable[Finding]) -> RiskLevel:
    """Fold findings into a risk level, starting at negligible."""
    return reduce(
        lambda level, finding: RiskLevel.escalate(level, finding.level),
        findings,
        RiskLevel.NEGLIGIBLE,
    )


# =============================================================================
# RiskAssessmentEngine
# =============================================================================


class RiskAssessmentEngine:
    """Policy engine producing a RiskAssessment from validation and facts.

    Attributes:
        _rules: Ordered rule functions; mitigations follow this order.
    """

    def __init__(self, rules: Optional[List[RiskRule]] = None) -> None:
        """Initialize RiskAssessmentEngine.

        Args:
            rules: Optional replacement rule list.
        """
        self._rules = list(rules) if rules is not None else list(DEFAULT_RULES)

    def collect_findings(
        self,
        report: ValidationReport,
        facts: ComplianceFacts,
    ) -> List[Finding]:
        """Run every rule and return the findings they propose, in rule order."""
        findings = []
        for rule in self._rules:
            finding = rule(report, facts)
            if finding is not None:
                findings.append(finding)
        return findings

    def assess(self, report: ValidationReport, facts: ComplianceFacts) -> RiskAssessment:
        """Assess the risk of a batch.

        Args:
            report: Geolocation validation report.
            facts: Compliance facts supplied by the caller.

        Returns:
            RiskAssessment with the escalated level and mitigations.
        """
        start_time = time.monotonic()
        findings = self.collect_findings(report, facts)
        assessment = RiskAssessment(
            level=fold_level(findings),
            mitigations=[f.mitigation for f in findings],
        )

        elapsed = time.monotonic() - start_time
        record_risk_assessment(assessment.level.value)
        observe_duration("assess_risk", elapsed)
        logger.info(
            "Risk assessed: level=%s, findings=%s (%.1f ms)",
            assessment.level.value,
            ",".join(f.rule for f in findings) or "none",
            elapsed * 1000,
        )
        return assessment


__all__ = [
    "DEFAULT_RULES",
    "RiskAssessmentEngine",
    "RiskRule",
    "check_deforestation",
    "check_geolocation",
    "check_legality",
    "check_plot_ids",
    "check_quantity",
    "fold_level",
]
