"""RuleSet value object — the effective heuristic flags for one decision."""

from dataclasses import dataclass

from brokercrm.domain.value_objects.enums import SettingsScope


@dataclass(frozen=True)
class RuleSet:
    use_workload_balance: bool
    use_language_match: bool
    use_performance_history: bool
    use_availability: bool
    use_round_robin: bool
    source: SettingsScope = SettingsScope.GLOBAL
    setting_id: int | None = None

    def enabled_terms(self) -> list[str]:
        terms = []
        if self.use_workload_balance:
            terms.append("workload")
        if self.use_language_match:
            terms.append("language")
        if self.use_performance_history:
            terms.append("performance")
        if self.use_availability:
            terms.append("availability")
        return terms
