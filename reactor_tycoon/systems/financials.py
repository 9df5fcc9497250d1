"""
Plant Financial Engine

Per-tick economics of the plant:

1. Revenue from turbine output, split across grid zones. Each zone pays its
   own price multiplier and a stability bonus when the plant covers enough
   of the zone's demand (penalty factor otherwise).
2. Operating cost made of a base rate, a component wear surcharge, an
   output-dependent term and a coolant chemistry correction cost.
3. Profit is added to the running balance without a floor.
4. Component wear and coolant chemistry drift, both scaled by billed time.

Simulated time is billed with an acceleration factor:
hour_fraction = delta_time / 3_600_000 * time_acceleration.

Revenue is computed from the turbine output passed in by the caller. The
driver updates the turbine after the reactor, so that value is always the
previous tick's output.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

from ..config import EconomyConfig
from ..random_source import RandomSource, centered, create_random_source

if TYPE_CHECKING:
    from .reactor_core import ReactorCore

MS_PER_HOUR = 1000.0 * 60.0 * 60.0


@dataclass
class FinancialReport:
    """Breakdown of one tick's finances"""
    hour_fraction: float
    base_revenue: float
    revenue: float
    wear_cost: float
    output_cost: float
    chemistry_cost: float
    operating_costs: float
    profit: float

    def get_state_dict(self) -> Dict[str, float]:
        return dict(self.__dict__)


class FinancialEngine:
    """Revenue, operating cost and wear model"""

    def __init__(self, config: Optional[EconomyConfig] = None, rng: Optional[RandomSource] = None):
        self.config = config if config is not None else EconomyConfig()
        self.rng = rng if rng is not None else create_random_source()

    def hour_fraction(self, delta_time: float) -> float:
        """Billed hours represented by ``delta_time`` milliseconds"""
        return (delta_time / MS_PER_HOUR) * self.config.time_acceleration

    def calculate_revenue(self, reactor: "ReactorCore", turbine_output: float,
                          hour_fraction: float) -> tuple:
        """
        Calculate grid revenue for one tick

        Args:
            reactor: Reactor providing max_power and the grid zones
            turbine_output: Turbine output (MW) billed this tick
            hour_fraction: Billed hours for this tick

        Returns:
            Tuple of (base_revenue, revenue)
        """
        cfg = self.config
        base_revenue = turbine_output * cfg.power_price * hour_fraction
        zone_count = len(reactor.grid_zones)

        revenue = 0.0
        for zone in reactor.grid_zones:
            zone_demand_met = min(1.0, turbine_output / (reactor.max_power * zone.demand))
            zone_revenue = (base_revenue / zone_count) * zone.price_multiplier
            if zone_demand_met >= zone.stability_required:
                stability_factor = cfg.stability_bonus
            else:
                stability_factor = cfg.stability_penalty
            revenue += zone_revenue * stability_factor

        return base_revenue, revenue

    def calculate_chemistry_cost(self, reactor: "ReactorCore") -> float:
        """Cost per billed hour of correcting coolant chemistry deviations"""
        cfg = self.config
        chemistry = reactor.coolant_chemistry
        return (abs(chemistry.ph - cfg.ph_target) * cfg.ph_cost_weight
                + abs(chemistry.conductivity - cfg.conductivity_target) * cfg.conductivity_cost_weight
                + abs(chemistry.dissolved_oxygen - cfg.dissolved_oxygen_target) * cfg.dissolved_oxygen_cost_weight)

    def update(self, reactor: "ReactorCore", turbine_output: float, delta_time: float) -> FinancialReport:
        """
        Run the financial step for one tick and mutate the reactor ledger

        Args:
            reactor: Reactor whose balance, wear and chemistry are updated
            turbine_output: Previous-tick turbine output (MW)
            delta_time: Elapsed time in milliseconds

        Returns:
            FinancialReport for this tick
        """
        cfg = self.config
        hour_fraction = self.hour_fraction(delta_time)

        base_revenue, revenue = self.calculate_revenue(reactor, turbine_output, hour_fraction)

        power_ratio = reactor.power_output / reactor.max_power
        base_cost = cfg.base_operating_cost * hour_fraction
        wear_cost = sum((1.0 - factor / 100.0) * cfg.base_operating_cost * cfg.wear_cost_fraction
                        for factor in reactor.wear_factors.values()) * hour_fraction
        output_cost = power_ratio * cfg.base_operating_cost * cfg.output_cost_fraction * hour_fraction
        chemistry_cost = self.calculate_chemistry_cost(reactor) * hour_fraction
        operating_costs = base_cost + output_cost + wear_cost + chemistry_cost

        profit = revenue - operating_costs
        reactor.total_profit += profit

        wear_multiplier = reactor.config.overdrive.wear_multiplier if reactor.overdrive_active else 1.0
        for component in reactor.wear_factors:
            wear = float(self.rng.random()) * cfg.wear_rate * power_ratio * hour_fraction
            wear *= wear_multiplier
            reactor.wear_factors[component] = max(0.0, reactor.wear_factors[component] - wear)

        chemistry = reactor.coolant_chemistry
        chemistry.ph += centered(self.rng, 2.0 * cfg.ph_drift) * hour_fraction
        chemistry.conductivity += centered(self.rng, 2.0 * cfg.conductivity_drift) * hour_fraction
        chemistry.dissolved_oxygen += centered(self.rng, 2.0 * cfg.dissolved_oxygen_drift) * hour_fraction

        return FinancialReport(
            hour_fraction=hour_fraction,
            base_revenue=base_revenue,
            revenue=revenue,
            wear_cost=wear_cost,
            output_cost=output_cost,
            chemistry_cost=chemistry_cost,
            operating_costs=operating_costs,
            profit=profit,
        )
