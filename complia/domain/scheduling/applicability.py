"""Matching catalog compliances to entity types."""

from collections.abc import Iterable, Mapping

from complia.domain.scheduling.types import (
    ApplicableCompliance,
    Compliance,
    EntityComplianceSetting,
)


def match_applicable(catalog: Iterable[Compliance], entity_type: str) -> list[Compliance]:
    """Active compliances whose entity-type set contains ``entity_type``.

    Tags are compared exactly. The result is ordered by category, then name.
    """
    return sorted(
        (
            compliance
            for compliance in catalog
            if compliance.is_active and entity_type in compliance.entity_types
        ),
        key=lambda compliance: (compliance.category, compliance.name),
    )


def merge_settings(
    compliances: Iterable[Compliance],
    settings: Mapping[int, EntityComplianceSetting],
) -> list[ApplicableCompliance]:
    """Attach the entity's per-compliance settings, or defaults when absent."""
    merged = []
    for compliance in compliances:
        setting = settings.get(compliance.id)
        if setting is None:
            merged.append(ApplicableCompliance(compliance=compliance))
            continue
        merged.append(
            ApplicableCompliance(
                compliance=compliance,
                is_applicable=setting.is_applicable,
                assignee_id=setting.assignee_id,
                priority=setting.priority,
                custom_due_date=setting.custom_due_date,
                notes=setting.notes,
            )
        )
    return merged
