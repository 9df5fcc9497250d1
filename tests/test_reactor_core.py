"""
Unit tests for the reactor core model.
"""

import pytest

from reactor_tycoon.random_source import create_random_source
from reactor_tycoon.systems import notifications
from reactor_tycoon.systems.reactor_core import ReactorCore
from reactor_tycoon.systems.turbine import Turbine

from .conftest import FixedRandom, SequenceRandom


def _kinds(bus):
    return [n.kind for n in bus.history]


class TestReactorTick:
    """Test the fission and thermal dynamics."""

    def test_fresh_reactor(self, reactor):
        """Test the cold, shut-down initial state."""
        assert reactor.temperature == 20.0
        assert reactor.control_rod_position == 100.0
        assert reactor.power_output == 0.0
        assert len(reactor.fuel_rods) == 5
        assert reactor.average_fuel_health == 100.0
        assert reactor.power_demand == 0.5

    def test_rod_withdrawal_one_second(self, reactor, turbine):
        """Rods close half the gap in one second, giving half fission."""
        reactor.adjust_control_rods(0.0)
        reactor.adjust_coolant_flow(100.0)
        reactor.update(1000.0, turbine)

        assert reactor.control_rod_position == pytest.approx(50.0)
        assert reactor.fission_rate == pytest.approx(0.5)
        # Heating 0.55 * 70 is below cooling 1.05 * 40, so the core stays at ambient
        assert reactor.temperature == pytest.approx(20.0)
        assert reactor.power_output == pytest.approx(20.0)
        assert all(rod.health == pytest.approx(99.995) for rod in reactor.fuel_rods)

    def test_temperature_never_below_ambient(self, reactor, turbine):
        """Test that cooling cannot take the core below ambient."""
        for _ in range(20):
            reactor.update(1000.0, turbine)
            assert reactor.temperature >= 20.0

    def test_power_is_not_capped(self, reactor, turbine):
        """Test that power output can exceed max_power when hot."""
        reactor.temperature = 900.0
        reactor.control_rod_position = 0.0
        reactor.adjust_control_rods(0.0)
        reactor.update(16.0, turbine)
        assert reactor.power_output > reactor.max_power

    def test_rod_position_clamped_under_sensor_noise(self, quiet_config, turbine):
        """Test that sensor noise cannot push the rods outside 0-100."""
        reactor = ReactorCore(quiet_config, FixedRandom(0.0))
        reactor.adjust_control_rods(0.0)
        reactor.control_rod_position = 0.0
        reactor.control_rod_noise_amount = 1000.0
        reactor.update(1000.0, turbine)
        assert reactor.control_rod_position == 0.0

    def test_coolant_degrades_with_temperature(self, reactor, turbine):
        """Test coolant quality loss at operating temperature."""
        reactor.temperature = 500.0
        reactor.update(1000.0, turbine)
        assert reactor.coolant_quality < 100.0

    def test_steam_particles_spawn_when_hot(self, quiet_config, turbine):
        """Test steam particle spawn and motion above 100°C."""
        reactor = ReactorCore(quiet_config, SequenceRandom([0.5, 0.5, 0.1, 0.5, 0.5]))
        reactor.temperature = 300.0
        reactor.control_rod_position = 0.0
        reactor.adjust_control_rods(0.0)
        reactor.update(16.0, turbine)

        assert len(reactor.steam_particles) == 1
        particle = reactor.steam_particles[0]
        assert particle.x == pytest.approx(300.0)
        assert particle.y == pytest.approx(398.0)
        assert particle.opacity == pytest.approx(0.99)

    def test_no_steam_when_cold(self, reactor, turbine):
        """Test that a cold core emits no steam."""
        reactor.update(16.0, turbine)
        assert reactor.steam_particles == []

    def test_degradation_is_monotonic(self, quiet_config, turbine):
        """Test that wear, fuel and coolant never recover on their own."""
        reactor = ReactorCore(quiet_config, create_random_source(42))
        reactor.adjust_control_rods(50.0)
        previous_wear = dict(reactor.wear_factors)
        previous_fuel = reactor.average_fuel_health
        previous_coolant = reactor.coolant_quality
        for _ in range(200):
            reactor.update(1000.0, turbine)
            for component, value in reactor.wear_factors.items():
                assert 0.0 <= value <= previous_wear[component]
            assert reactor.average_fuel_health <= previous_fuel
            assert reactor.coolant_quality <= previous_coolant
            previous_wear = dict(reactor.wear_factors)
            previous_fuel = reactor.average_fuel_health
            previous_coolant = reactor.coolant_quality


class TestCommands:
    """Test operator commands and clamping."""

    @pytest.mark.parametrize("requested,expected", [(150.0, 100.0), (-10.0, 0.0), (42.0, 42.0)])
    def test_control_rod_target_clamped(self, reactor, requested, expected):
        """Test rod target clamping."""
        reactor.adjust_control_rods(requested)
        assert reactor.target_control_rod_position == expected

    @pytest.mark.parametrize("requested,expected", [(250.0, 100.0), (-1.0, 0.0), (75.0, 75.0)])
    def test_coolant_target_clamped(self, reactor, requested, expected):
        """Test coolant flow target clamping."""
        reactor.adjust_coolant_flow(requested)
        assert reactor.target_coolant_flow == expected


class TestOverdrive:
    """Test the overdrive state machine."""

    def test_refused_without_funds(self, reactor):
        """Test overdrive refusal with an empty balance."""
        assert reactor.activate_overdrive() is False
        assert reactor.overdrive_active is False
        assert reactor.total_profit == 0.0

    def test_activation(self, reactor, bus):
        """Test overdrive activation debit and temperature bonus."""
        reactor.total_profit = 30000.0
        assert reactor.activate_overdrive() is True
        assert reactor.total_profit == 0.0
        assert reactor.overdrive_active is True
        assert reactor.max_temp == 1400.0
        assert reactor.overdrive_time_remaining == 45000.0
        assert notifications.OVERDRIVE_ACTIVATED in _kinds(bus)

    def test_not_reentrant(self, reactor):
        """Test that active overdrive cannot be re-activated."""
        reactor.total_profit = 1_000_000.0
        assert reactor.activate_overdrive() is True
        assert reactor.activate_overdrive() is False
        assert reactor.total_profit == 970_000.0

    def test_expiry_and_cooldown(self, reactor, turbine, bus):
        """Test overdrive expiry followed by cooldown."""
        reactor.total_profit = 30000.0
        reactor.activate_overdrive()

        reactor.update(45000.0, turbine)
        assert reactor.overdrive_active is False
        assert reactor.max_temp == 1000.0
        assert reactor.overdrive_cooldown_remaining == 5000.0
        assert notifications.OVERDRIVE_DEACTIVATED in _kinds(bus)

        reactor.total_profit = 1_000_000.0
        assert reactor.activate_overdrive() is False

        reactor.update(5000.0, turbine)
        assert reactor.overdrive_cooldown_remaining == 0.0
        assert reactor.activate_overdrive() is True

    def test_active_and_cooldown_are_exclusive(self, quiet_config, turbine):
        """Test that overdrive is never active during cooldown."""
        reactor = ReactorCore(quiet_config, create_random_source(11))
        for _ in range(400):
            reactor.total_profit = 1_000_000.0
            reactor.activate_overdrive()
            reactor.update(700.0, turbine)
            assert not (reactor.overdrive_active and reactor.overdrive_cooldown_remaining > 0)


class TestSafety:
    """Test meltdown, SCRAM and the high temperature alarm."""

    def test_meltdown(self, reactor, turbine, bus):
        """Test core damage and the meltdown penalty."""
        reactor.total_profit = 6_000_000.0
        reactor.temperature = 1500.0
        reactor.update(16.0, turbine)

        assert reactor.damaged is True
        meltdown = [entry for entry in reactor.tick_adjustments if entry.reason == "meltdown"]
        assert len(meltdown) == 1
        assert meltdown[0].amount == pytest.approx(-5_000_000.0)
        assert notifications.REACTOR_DAMAGED in _kinds(bus)

    def test_meltdown_penalty_floored(self, reactor, turbine):
        """Test that the meltdown penalty stops at a zero balance."""
        reactor.total_profit = 1_000_000.0
        reactor.temperature = 1500.0
        reactor.update(16.0, turbine)
        meltdown = [entry for entry in reactor.tick_adjustments if entry.reason == "meltdown"]
        assert meltdown[0].amount == pytest.approx(-1_000_000.0)

    def test_damaged_core_is_frozen(self, reactor, turbine):
        """Test that a damaged core ignores ticks and commands."""
        reactor.temperature = 1500.0
        reactor.update(16.0, turbine)
        before = reactor.get_state_dict()

        reactor.update(1000.0, turbine)
        reactor.adjust_control_rods(0.0)
        reactor.adjust_coolant_flow(0.0)

        assert reactor.get_state_dict() == before

    def test_no_overdrive_after_damage(self, reactor, turbine):
        """Test overdrive refusal on a damaged core."""
        reactor.temperature = 1500.0
        reactor.update(16.0, turbine)
        reactor.total_profit = 1_000_000.0
        assert reactor.activate_overdrive() is False

    def test_scram_forces_rods_in(self, reactor, turbine, bus):
        """Test SCRAM rod override and single notification."""
        reactor.adjust_control_rods(0.0)
        reactor.scram()
        reactor.scram()
        reactor.adjust_control_rods(0.0)
        reactor.update(16.0, turbine)

        assert reactor.scram_active is True
        assert reactor.target_control_rod_position == 100.0
        assert _kinds(bus).count(notifications.SCRAM_TRIGGERED) == 1

    def test_scram_penalty_charged_every_tick(self, reactor, turbine):
        """Test that SCRAM is charged on every tick it stays active."""
        reactor.total_profit = 3_000_000.0
        reactor.scram()
        for _ in range(2):
            reactor.update(16.0, turbine)
            scram = [entry for entry in reactor.tick_adjustments if entry.reason == "scram"]
            assert len(scram) == 1
            assert scram[0].amount == pytest.approx(-1_000_000.0)
        assert reactor.total_profit < 1_000_000.0

    def test_high_temperature_published_on_crossing(self, reactor, turbine, bus):
        """Test the high temperature notification fires once per crossing."""
        reactor.temperature = 850.0
        reactor.update(16.0, turbine)
        reactor.update(16.0, turbine)
        assert _kinds(bus).count(notifications.HIGH_TEMPERATURE) == 1


class TestLedger:
    """Test balance bookkeeping."""

    def test_penalty_floors_at_zero(self, reactor):
        """Test penalty flooring and ledger recording."""
        reactor.total_profit = 100.0
        assert reactor.apply_penalty(500.0, "test") == pytest.approx(100.0)
        assert reactor.total_profit == 0.0
        assert reactor.tick_adjustments[-1].amount == pytest.approx(-100.0)

    def test_profit_has_no_floor(self, reactor, turbine):
        """Test that operating losses can take the balance negative."""
        reactor.update(1000.0, turbine)
        assert reactor.profit < 0.0
        assert reactor.total_profit == pytest.approx(reactor.profit)

    def test_tick_identity(self, turbine):
        """Test balance = previous balance + adjustments + profit on every tick."""
        reactor = ReactorCore(rng=create_random_source(7))
        reactor.total_profit = 5_000_000.0
        reactor.adjust_control_rods(40.0)
        turbine.output = 600.0
        for _ in range(100):
            before = reactor.total_profit
            reactor.update(1000.0, turbine)
            adjustments = sum(entry.amount for entry in reactor.tick_adjustments)
            assert reactor.total_profit == pytest.approx(before + adjustments + reactor.last_report.profit)
            assert reactor.profit == reactor.last_report.profit


class TestMaintenance:
    """Test paid maintenance."""

    def test_fuel_replacement_refused_when_poor(self, reactor):
        """Test fuel replacement refusal without funds."""
        for rod in reactor.fuel_rods:
            rod.health = 40.0
        reactor.total_profit = 999_999.0
        assert reactor.replace_fuel_rods() is False
        assert [rod.health for rod in reactor.fuel_rods] == [40.0] * 5
        assert reactor.total_profit == 999_999.0

    def test_fuel_replacement(self, reactor, bus):
        """Test paid fuel replacement."""
        for rod in reactor.fuel_rods:
            rod.health = 40.0
        reactor.total_profit = 2_000_000.0
        assert reactor.replace_fuel_rods() is True
        assert reactor.average_fuel_health == 100.0
        assert reactor.total_profit == 1_000_000.0
        assert bus.history[-1].kind == notifications.MAINTENANCE_COMPLETED
        assert bus.history[-1].data['action'] == "replace_fuel_rods"

    def test_coolant_replacement(self, reactor):
        """Test paid coolant replacement."""
        reactor.coolant_quality = 10.0
        reactor.total_profit = 100_000.0
        assert reactor.replace_coolant() is True
        assert reactor.coolant_quality == 100.0
        assert reactor.total_profit == 0.0

    def test_turbine_maintenance(self, reactor):
        """Test paid turbine overhaul."""
        turbine = Turbine()
        turbine.health = 10.0
        reactor.total_profit = 250_000.0
        assert reactor.maintain_turbine(turbine) is True
        assert turbine.health == 100.0
        assert reactor.total_profit == 0.0

    def test_turbine_maintenance_refused_when_poor(self, reactor):
        """Test turbine overhaul refusal without funds."""
        turbine = Turbine()
        turbine.health = 10.0
        assert reactor.maintain_turbine(turbine) is False
        assert turbine.health == 10.0

    def test_maintenance_allowed_while_damaged(self, reactor):
        """Test paid maintenance on a damaged core."""
        reactor.damaged = True
        reactor.total_profit = 100_000.0
        assert reactor.replace_coolant() is True
