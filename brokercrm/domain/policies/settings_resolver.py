"""SettingsResolver — merge the global row and a team override into a RuleSet."""

from __future__ import annotations

from brokercrm.domain.entities.smart_assignment_setting import SmartAssignmentSetting
from brokercrm.domain.value_objects.rule_set import RuleSet


def resolve_rule_set(
    team_setting: SmartAssignmentSetting | None,
    global_setting: SmartAssignmentSetting | None,
) -> RuleSet | None:
    """Two-level lookup: enabled team override first, then the global row.

    A team override that is disabled does not block assignment, the team
    simply inherits the global behaviour.

    Args:
        team_setting: the override row for the client's team, if any.
        global_setting: the single global row, if configured.

    Returns:
        The effective RuleSet, or None when smart assignment is disabled
        (no global row, or the global row is switched off).
    """
    if team_setting is not None and team_setting.team_id is None:
        raise ValueError("Team override must reference a team")

    if team_setting is not None and team_setting.is_enabled:
        return _to_rule_set(team_setting)

    if global_setting is None or not global_setting.is_enabled:
        return None

    return _to_rule_set(global_setting)


def _to_rule_set(setting: SmartAssignmentSetting) -> RuleSet:
    return RuleSet(
        use_workload_balance=setting.use_workload_balance,
        use_language_match=setting.use_language_match,
        use_performance_history=setting.use_performance_history,
        use_availability=setting.use_availability,
        use_round_robin=setting.use_round_robin,
        source=setting.scope,
        setting_id=setting.id,
    )
